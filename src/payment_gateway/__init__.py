"""
Payment gateway framework.

Building blocks for credit card and eCheck gateway integrations:
payment tokens and their store, and the API request/response layer
(including Apple Pay merchant validation).
"""

from .tokens import (
    PaymentToken,
    CardDetails,
    EcheckDetails,
    PaymentTokenStore,
    PaymentTokenError,
    MissingAttributeError,
    InvalidAttributeError,
    TokenNotFoundError,
    type_to_name,
    register_type_name_filter,
)

from .api import (
    APIRequest,
    JSONRequest,
    APIResponse,
    JSONResponse,
    APIError,
    APIResponseError,
    ApplePayRequest,
    ApplePayResponse,
)

__version__ = "0.1.0"

__all__ = [
    "PaymentToken",
    "CardDetails",
    "EcheckDetails",
    "PaymentTokenStore",
    "PaymentTokenError",
    "MissingAttributeError",
    "InvalidAttributeError",
    "TokenNotFoundError",
    "type_to_name",
    "register_type_name_filter",
    "APIRequest",
    "JSONRequest",
    "APIResponse",
    "JSONResponse",
    "APIError",
    "APIResponseError",
    "ApplePayRequest",
    "ApplePayResponse",
]
