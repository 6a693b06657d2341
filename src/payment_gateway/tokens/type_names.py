"""
Payment type display names.

Translates a stored type code ('mc', 'amex', 'echeck', ...) into the name
shown to customers ('MasterCard', 'American Express', 'eCheck', ...).

Integrations can adjust the result by registering name filters:

    def rename_visa(name, type_code):
        return "Visa Card" if type_code == "visa" else name

    register_type_name_filter(rename_visa)

Filters run in registration order; each receives the name produced so far
and the raw type code, and returns the name to use.
"""

import threading
from typing import Callable, List, Optional

import structlog

from ..shared.constants import CARD_TYPE_NAMES

logger = structlog.get_logger(__name__)

TypeNameFilter = Callable[[str, str], str]

# ucwords() word delimiters
_WORD_DELIMITERS = " \t\r\n\f\v"


def _capitalize_words(text: str) -> str:
    """Upper-case the first character of each word, leaving the rest as-is."""
    chars = []
    at_word_start = True
    for char in text:
        chars.append(char.upper() if at_word_start else char)
        at_word_start = char in _WORD_DELIMITERS
    return "".join(chars)


class TypeNameFilters:
    """Ordered list of callbacks that may override a computed type name."""

    def __init__(self):
        self._filters: List[TypeNameFilter] = []
        self._lock = threading.Lock()

    def register(self, callback: TypeNameFilter) -> TypeNameFilter:
        """Append a filter. Returns it, so this can be used as a decorator."""
        with self._lock:
            self._filters.append(callback)
        return callback

    def unregister(self, callback: TypeNameFilter) -> None:
        """Remove a filter. Raises ValueError if it was never registered."""
        with self._lock:
            self._filters.remove(callback)

    def clear(self) -> None:
        with self._lock:
            self._filters.clear()

    def apply(self, name: str, type_code: str) -> str:
        with self._lock:
            filters = list(self._filters)

        for callback in filters:
            filtered = callback(name, type_code)
            if filtered != name:
                logger.debug(
                    "type_name_filtered",
                    type_code=type_code,
                    name=name,
                    filtered_name=filtered,
                )
            name = filtered
        return name

    def __len__(self) -> int:
        return len(self._filters)


_default_filters = TypeNameFilters()


def get_type_name_filters() -> TypeNameFilters:
    """Return the module-wide filter registry."""
    return _default_filters


def register_type_name_filter(callback: TypeNameFilter) -> TypeNameFilter:
    """Register a filter on the module-wide registry."""
    return _default_filters.register(callback)


def reset_type_name_filters() -> None:
    """Remove every filter from the module-wide registry (useful for tests)."""
    _default_filters.clear()


def type_to_name(type_code: str, filters: Optional[TypeNameFilters] = None) -> str:
    """
    Translate a payment type code to a full name, ie 'mc' => 'MasterCard'.

    Codes without a special case have their dashes replaced by spaces and
    each word capitalized: 'visa' => 'Visa', 'some-brand' => 'Some Brand'.

    Args:
        type_code: The payment type, ie 'mc', 'amex', 'echeck'
        filters: Registry to run the name through. Defaults to the
            module-wide registry.

    Returns:
        The display name
    """
    name = CARD_TYPE_NAMES.get(type_code)
    if not name:
        name = _capitalize_words(type_code.replace("-", " "))

    if filters is None:
        filters = _default_filters
    return filters.apply(name, type_code)
