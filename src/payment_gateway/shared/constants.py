"""
Shared constants and configuration for the payment gateway framework.

This module defines constants used across payment tokens, the
API request/response layer and the token store.
"""

from enum import Enum

# =============================================================================
# PAYMENT TYPES
# =============================================================================

class CardType(str, Enum):
    """Payment type codes as stored with a token."""
    VISA = "visa"
    MASTERCARD = "mc"
    AMEX = "amex"
    DISCOVER = "disc"
    DINERS = "diners"
    JCB = "jcb"
    CARTEBLEUE = "cartebleue"
    PAYPAL = "paypal"
    ECHECK = "echeck"


# Display names for types whose name can't be derived from the code.
# Anything not listed here falls back to dash-to-space + word capitalization.
CARD_TYPE_NAMES = {
    CardType.MASTERCARD.value: "MasterCard",
    CardType.AMEX.value: "American Express",
    CardType.DISCOVER.value: "Discover",
    CardType.JCB.value: "JCB",
    CardType.CARTEBLEUE.value: "CarteBleue",
    CardType.PAYPAL.value: "PayPal",
    CardType.ECHECK.value: "eCheck",
}


# =============================================================================
# DATASTORE KEYS
# =============================================================================

class TokenField(str, Enum):
    """Keys of a token's datastore representation."""
    DEFAULT = "default"
    TYPE = "type"
    LAST_FOUR = "last_four"
    EXP_MONTH = "exp_month"
    EXP_YEAR = "exp_year"


# =============================================================================
# CONFIGURATION
# =============================================================================

class Config:
    """Configuration constants."""

    # Masking for safe request/response rendering
    MASK_CHAR = "*"
    UNMASKED_TRAILING_CHARS = 4

    # Fields masked by JSONRequest.to_string_safe() unless a subclass overrides
    DEFAULT_SENSITIVE_FIELDS = frozenset({
        "card_number",
        "account_number",
        "cvv",
        "csc",
        "token",
        "api_key",
        "password",
    })

    # Token store encryption at rest
    ENCRYPTION_ALGORITHM = "AES-256-GCM"
    KEY_LENGTH = 32  # 256 bits
    NONCE_LENGTH = 12  # 96 bits for GCM
    SALT_LENGTH = 16  # 128 bits
    PBKDF2_ITERATIONS = 100000
    KEY_VERSION = "v1"

    # Apple Pay merchant validation
    APPLE_PAY_SUCCESS_CODES = (200, "200", "success")
