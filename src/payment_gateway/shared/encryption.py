"""
Encryption and masking utilities for payment data.

EncryptionService seals token store records at rest.
Masker produces log-safe renderings of sensitive values.
"""

import base64
import os
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .constants import Config


class EncryptionError(Exception):
    """Decryption failed (wrong key, wrong key version or tampered data)."""
    pass


@dataclass(frozen=True)
class EncryptedData:
    """
    Container for encrypted data with all metadata needed for decryption.
    """
    ciphertext: str      # Base64 encoded encrypted data
    nonce: str           # Base64 encoded nonce
    salt: str            # Base64 encoded salt for key derivation
    key_version: str     # Which key was used (for rotation)
    algorithm: str


class EncryptionService:
    """
    AES-256-GCM encryption with a PBKDF2-derived key per record.

    Every call to encrypt() draws a fresh salt and nonce, so encrypting
    the same plaintext twice gives different ciphertexts.
    """

    def __init__(self, master_key: Optional[bytes] = None, key_version: str = Config.KEY_VERSION):
        """
        Args:
            master_key: 32 byte master key. A random one is generated when
                omitted, which only suits an in-process store.
            key_version: Version identifier for key rotation
        """
        if master_key is None:
            master_key = os.urandom(Config.KEY_LENGTH)
        if len(master_key) != Config.KEY_LENGTH:
            raise ValueError(f"Master key must be {Config.KEY_LENGTH} bytes")

        self.master_key = master_key
        self.key_version = key_version

    def encrypt(self, plaintext: str) -> EncryptedData:
        salt = os.urandom(Config.SALT_LENGTH)
        nonce = os.urandom(Config.NONCE_LENGTH)

        aesgcm = AESGCM(self._derive_key(salt))
        ciphertext = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)

        return EncryptedData(
            ciphertext=base64.b64encode(ciphertext).decode(),
            nonce=base64.b64encode(nonce).decode(),
            salt=base64.b64encode(salt).decode(),
            key_version=self.key_version,
            algorithm=Config.ENCRYPTION_ALGORITHM,
        )

    def decrypt(self, encrypted: EncryptedData) -> str:
        """
        Decrypt encrypted data.

        Raises:
            EncryptionError: If the key version differs or the data was tampered with
        """
        if encrypted.key_version != self.key_version:
            raise EncryptionError(
                f"Key version mismatch: data encrypted with {encrypted.key_version}, "
                f"but current key is {self.key_version}"
            )

        ciphertext = base64.b64decode(encrypted.ciphertext)
        nonce = base64.b64decode(encrypted.nonce)
        salt = base64.b64decode(encrypted.salt)

        aesgcm = AESGCM(self._derive_key(salt))
        try:
            plaintext = aesgcm.decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise EncryptionError("Decryption failed: authentication tag mismatch") from e
        return plaintext.decode("utf-8")

    def _derive_key(self, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=Config.KEY_LENGTH,
            salt=salt,
            iterations=Config.PBKDF2_ITERATIONS,
        )
        return kdf.derive(self.master_key)


class Masker:
    """
    Masks sensitive values for display and logging.

    Only the trailing characters are kept:
        4242424242424242 → ************4242
        4242 4242 4242 4242 → **** **** **** 4242
        123 → ***
    """

    @staticmethod
    def mask(value: str, visible: int = Config.UNMASKED_TRAILING_CHARS) -> str:
        if len(value) <= visible:
            return Config.MASK_CHAR * len(value)

        # Maintain spacing pattern of formatted card numbers
        if " " in value:
            parts = value.split(" ")
            masked_parts = [Config.MASK_CHAR * len(p) for p in parts[:-1]]
            last_part = parts[-1]
            if len(last_part) < visible:
                return Masker.mask(value.replace(" ", ""), visible)
            masked_parts.append(Config.MASK_CHAR * (len(last_part) - visible) + last_part[-visible:])
            return " ".join(masked_parts)

        return Config.MASK_CHAR * (len(value) - visible) + value[-visible:]

    @classmethod
    def scrub(cls, data: Any, fields: Iterable[str]) -> Any:
        """
        Return a copy of decoded JSON data with the named fields masked at
        any depth. Non-string values under a sensitive key are masked
        through their string form.
        """
        fields = frozenset(fields)

        if isinstance(data, dict):
            scrubbed = {}
            for key, value in data.items():
                if key in fields:
                    scrubbed[key] = cls._mask_all(value)
                else:
                    scrubbed[key] = cls.scrub(value, fields)
            return scrubbed

        if isinstance(data, (list, tuple)):
            return [cls.scrub(item, fields) for item in data]

        return data

    @classmethod
    def _mask_all(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: cls._mask_all(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [cls._mask_all(item) for item in value]
        if value is None or value == "":
            return value
        return cls.mask(str(value))
