"""Gateway API package initialization."""

from .requests import APIRequest, JSONRequest, log_api_request

from .responses import (
    APIResponse,
    JSONResponse,
    APIError,
    APIResponseError,
)

from .apple_pay import ApplePayRequest, ApplePayResponse

__all__ = [
    # Requests
    "APIRequest",
    "JSONRequest",
    "log_api_request",
    # Responses
    "APIResponse",
    "JSONResponse",
    "APIError",
    "APIResponseError",
    # Apple Pay
    "ApplePayRequest",
    "ApplePayResponse",
]
