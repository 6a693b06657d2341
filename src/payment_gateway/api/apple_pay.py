"""
Apple Pay merchant validation request and response.

When a shopper opens the Apple Pay sheet, the browser asks the merchant
to validate itself. The gateway posts an ApplePayRequest to Apple's
validation URL and relays the returned merchant session, untouched, back
to the browser's Apple Pay JS session.
"""

from typing import Any, Dict, Mapping, Optional

from ..shared.constants import Config
from ..shared.encryption import Masker
from .requests import JSONRequest
from .responses import APIResponse, JSONResponse, encode_json


class ApplePayRequest(JSONRequest):
    """Merchant validation request."""

    sensitive_fields = frozenset({"merchantIdentifier"})

    def __init__(self, validation_url: str = ""):
        super().__init__(method="POST", path=validation_url)

    def set_merchant_data(self, merchant_id: str, domain_name: str, display_name: str) -> None:
        """
        Args:
            merchant_id: Apple merchant identifier
            domain_name: Verified domain the payment sheet is shown on
            display_name: Store name shown to the shopper
        """
        self.data = {
            "merchantIdentifier": merchant_id,
            "domainName": domain_name,
            "displayName": display_name,
        }


class ApplePayResponse(APIResponse):
    """
    Merchant validation response.

    Wraps a decoded JSON body. A validated merchant session has no status
    fields; Apple reports failures with statusCode and statusMessage.
    Missing fields read as None.
    """

    # Masked in to_string_safe() only; get_merchant_session() is always verbatim
    SESSION_SECRET_FIELDS = frozenset({"merchantSessionIdentifier", "signature", "nonce"})

    def __init__(self, response: JSONResponse):
        self.response = response

    @classmethod
    def from_body(cls, raw_response: str) -> "ApplePayResponse":
        """
        Raises:
            APIResponseError: If the body isn't a JSON object
        """
        return cls(JSONResponse(raw_response))

    @classmethod
    def from_decoded(cls, data: Mapping[str, Any]) -> "ApplePayResponse":
        return cls(JSONResponse.from_decoded(data))

    def get_status_code(self) -> Optional[Any]:
        return self.response.get("statusCode")

    def get_status_message(self) -> Optional[Any]:
        return self.response.get("statusMessage")

    def get_merchant_session(self) -> Dict[str, Any]:
        """Gets the validated merchant session: the whole decoded body."""
        return self.response.raw_response_json

    def is_success(self) -> bool:
        status_code = self.get_status_code()
        return status_code is None or status_code in Config.APPLE_PAY_SUCCESS_CODES

    def to_string(self) -> str:
        return self.response.to_string()

    def to_string_safe(self) -> str:
        return encode_json(Masker.scrub(self.get_merchant_session(), self.SESSION_SECRET_FIELDS))
