"""Payment tokens package initialization."""

from .models import (
    PaymentToken,
    CardDetails,
    EcheckDetails,
    TokenDetails,
    PaymentTokenError,
    MissingAttributeError,
    InvalidAttributeError,
)

from .type_names import (
    TypeNameFilters,
    type_to_name,
    get_type_name_filters,
    register_type_name_filter,
    reset_type_name_filters,
)

from .store import PaymentTokenStore, TokenNotFoundError

__all__ = [
    # Models
    "PaymentToken",
    "CardDetails",
    "EcheckDetails",
    "TokenDetails",
    "PaymentTokenError",
    "MissingAttributeError",
    "InvalidAttributeError",
    # Type names
    "TypeNameFilters",
    "type_to_name",
    "get_type_name_filters",
    "register_type_name_filter",
    "reset_type_name_filters",
    # Store
    "PaymentTokenStore",
    "TokenNotFoundError",
]
