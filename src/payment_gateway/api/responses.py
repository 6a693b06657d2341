"""
Gateway API responses.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ..shared.encryption import Masker


class APIError(Exception):
    """Base exception for gateway API errors."""
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class APIResponseError(APIError):
    """The response body couldn't be decoded or encoded as a JSON object."""
    pass


def encode_json(data: Any) -> str:
    """
    Raises:
        APIResponseError: If data holds values JSON can't represent
    """
    try:
        return json.dumps(data)
    except (TypeError, ValueError) as e:
        raise APIResponseError(f"Response body is not JSON encodable: {e}", code="invalid_json") from e


class APIResponse(ABC):
    """Abstract gateway API response."""

    @abstractmethod
    def to_string(self) -> str:
        """Returns the string representation of this response."""
        ...

    @abstractmethod
    def to_string_safe(self) -> str:
        """Returns the string representation with sensitive elements masked."""
        ...


class JSONResponse(APIResponse):
    """
    A decoded JSON object response body.

    Build it from the raw body text, or with from_decoded() when the
    transport already decoded it. Missing keys read as None.
    """

    sensitive_fields: FrozenSet[str] = frozenset()

    def __init__(self, raw_response: str):
        """
        Raises:
            APIResponseError: If the body isn't a JSON object
        """
        try:
            decoded = json.loads(raw_response)
        except json.JSONDecodeError as e:
            raise APIResponseError(f"Invalid JSON response: {e.msg}", code="invalid_json") from e

        if not isinstance(decoded, dict):
            raise APIResponseError(
                f"Expected a JSON object, got {type(decoded).__name__}",
                code="invalid_json",
            )

        self._raw_response: Optional[str] = raw_response
        self.raw_response_json: Dict[str, Any] = decoded

    @classmethod
    def from_decoded(cls, data: Mapping[str, Any]) -> "JSONResponse":
        """Wrap a body the transport already decoded. The mapping is kept as-is."""
        instance = cls.__new__(cls)
        instance._raw_response = None
        instance.raw_response_json = dict(data)
        return instance

    @property
    def raw_response(self) -> str:
        """
        The body text. Encoded on first use for responses built with
        from_decoded().

        Raises:
            APIResponseError: If the decoded body can't be encoded as JSON
        """
        if self._raw_response is None:
            self._raw_response = encode_json(self.raw_response_json)
        return self._raw_response

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw_response_json.get(key, default)

    def to_string(self) -> str:
        return self.raw_response

    def to_string_safe(self) -> str:
        return encode_json(Masker.scrub(self.raw_response_json, self.sensitive_fields))
