"""Shared package initialization."""

from .constants import (
    CardType,
    CARD_TYPE_NAMES,
    TokenField,
    Config,
)

from .encryption import (
    EncryptionService,
    EncryptedData,
    EncryptionError,
    Masker,
)

from .logging import configure_logging

__all__ = [
    # Constants
    "CardType",
    "CARD_TYPE_NAMES",
    "TokenField",
    "Config",
    # Encryption
    "EncryptionService",
    "EncryptedData",
    "EncryptionError",
    "Masker",
    # Logging
    "configure_logging",
]
