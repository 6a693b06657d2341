"""
Gateway API requests.

Every request can render itself twice: in full for the wire, and with
sensitive values masked for logs and debug output.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Optional

import structlog

from ..shared.constants import Config
from ..shared.encryption import Masker

logger = structlog.get_logger(__name__)


class APIRequest(ABC):
    """Abstract gateway API request."""

    @abstractmethod
    def to_string(self) -> str:
        """Returns the string representation of this request."""
        ...

    @abstractmethod
    def to_string_safe(self) -> str:
        """
        Returns the string representation of this request with any and all
        sensitive elements masked or removed, safe for logging/displaying.
        """
        ...


class JSONRequest(APIRequest):
    """
    A request whose body is a JSON object.

    Subclasses fill self.data and list the keys to mask in
    sensitive_fields. Masking applies at any depth of the body.
    """

    sensitive_fields: FrozenSet[str] = Config.DEFAULT_SENSITIVE_FIELDS

    def __init__(self, method: str = "POST", path: str = "", data: Optional[Dict[str, Any]] = None):
        self.method = method
        self.path = path
        self.data: Dict[str, Any] = dict(data or {})

    def to_string(self) -> str:
        return json.dumps(self.data)

    def to_string_safe(self) -> str:
        return json.dumps(Masker.scrub(self.data, self.sensitive_fields))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.method} {self.path} {self.to_string_safe()})"


def log_api_request(request: APIRequest, response: Optional[Any] = None, **context: Any) -> None:
    """
    Log a request, and optionally its response, using only their safe
    renderings. The response may be anything with to_string_safe().
    """
    event: Dict[str, Any] = {"request": request.to_string_safe()}
    if isinstance(request, JSONRequest):
        event["method"] = request.method
        event["path"] = request.path
    if response is not None:
        event["response"] = response.to_string_safe()
    # Request fields win over caller context of the same name
    logger.bind(**context).info("api_request", **event)
