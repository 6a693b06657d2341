"""
Payment token store.

Keeps each customer's payment tokens in their datastore format, sealed
with AES-256-GCM. Nothing is cached: every read builds fresh
PaymentToken instances from the stored records.

Also owns the rule the tokens themselves don't enforce: a customer has
at most one default token.
"""

import json
import threading
from typing import Dict, List, Optional

import structlog

from ..shared.encryption import EncryptedData, EncryptionService
from .models import PaymentToken, PaymentTokenError
from .type_names import TypeNameFilters

logger = structlog.get_logger(__name__)


class TokenNotFoundError(PaymentTokenError):
    """Token doesn't exist for this customer."""
    def __init__(self, customer_id: str, token: str):
        super().__init__(
            f"No payment token {token} for customer {customer_id}",
            code="token_not_found",
        )
        self.customer_id = customer_id
        self.token = token


class PaymentTokenStore:
    """
    In-memory token datastore, safe to share between threads.

    Records are keyed by customer ID, then by token string, and hold the
    encrypted JSON of PaymentToken.to_datastore_format().
    """

    def __init__(
        self,
        encryption_service: Optional[EncryptionService] = None,
        type_name_filters: Optional[TypeNameFilters] = None,
    ):
        """
        Args:
            encryption_service: Seals records at rest. Creates one with a
                random key if not provided.
            type_name_filters: Passed to every token the store loads.
        """
        self.encryption = encryption_service or EncryptionService()
        self.type_name_filters = type_name_filters
        self._records: Dict[str, Dict[str, EncryptedData]] = {}
        # customer ID -> token string of their default token
        self._defaults: Dict[str, str] = {}
        self._lock = threading.Lock()

    def save(self, customer_id: str, token: PaymentToken) -> None:
        """
        Store (or replace) a token. Saving a default token clears the
        default flag of the customer's other tokens.
        """
        sealed = self._seal(token)
        while not self._commit(customer_id, token.get_token(), sealed, token.is_default()):
            pass

        logger.info(
            "payment_token_saved",
            customer_id=customer_id,
            token_type=token.get_type(),
            default=token.is_default(),
        )

    def get(self, customer_id: str, token: str) -> PaymentToken:
        """
        Raises:
            TokenNotFoundError: If the customer has no such token
        """
        with self._lock:
            sealed = self._records.get(customer_id, {}).get(token)
        if sealed is None:
            raise TokenNotFoundError(customer_id, token)
        return self._unseal(token, sealed)

    def list(self, customer_id: str) -> List[PaymentToken]:
        """All of a customer's tokens, in the order they were first saved."""
        with self._lock:
            records = list(self._records.get(customer_id, {}).items())
        return [self._unseal(token, sealed) for token, sealed in records]

    def delete(self, customer_id: str, token: str) -> None:
        """
        Raises:
            TokenNotFoundError: If the customer has no such token
        """
        with self._lock:
            records = self._records.get(customer_id, {})
            if token not in records:
                raise TokenNotFoundError(customer_id, token)
            del records[token]
            if self._defaults.get(customer_id) == token:
                del self._defaults[customer_id]

        logger.info("payment_token_deleted", customer_id=customer_id)

    def set_default(self, customer_id: str, token: str) -> PaymentToken:
        """
        Make one token the customer's default and every other token
        non-default. Returns the updated default token.

        Raises:
            TokenNotFoundError: If the customer has no such token
        """
        while True:
            with self._lock:
                sealed = self._records.get(customer_id, {}).get(token)
            if sealed is None:
                raise TokenNotFoundError(customer_id, token)

            payment_token = self._unseal(token, sealed)
            payment_token.set_default(True)
            if self._commit(customer_id, token, self._seal(payment_token), True, expected=sealed):
                break

        logger.info("payment_token_default_set", customer_id=customer_id)
        return payment_token

    def get_default(self, customer_id: str) -> Optional[PaymentToken]:
        with self._lock:
            token = self._defaults.get(customer_id)
            sealed = self._records.get(customer_id, {}).get(token) if token else None
        if sealed is None:
            return None
        return self._unseal(token, sealed)

    def _commit(
        self,
        customer_id: str,
        token: str,
        sealed: EncryptedData,
        default: bool,
        expected: Optional[EncryptedData] = None,
    ) -> bool:
        """
        Write one sealed record and keep the default index in step,
        demoting the previous default when this record is the new one.

        Decrypting and resealing happen outside the lock. Returns False,
        writing nothing, when another thread changed the records involved
        in the meantime; the caller starts over.
        """
        with self._lock:
            previous = self._defaults.get(customer_id)
            previous_sealed = None
            if default and previous is not None and previous != token:
                previous_sealed = self._records.get(customer_id, {}).get(previous)

        demoted = None
        if previous_sealed is not None:
            previous_token = self._unseal(previous, previous_sealed)
            previous_token.set_default(False)
            demoted = self._seal(previous_token)

        with self._lock:
            records = self._records.setdefault(customer_id, {})
            if expected is not None and records.get(token) is not expected:
                return False
            if self._defaults.get(customer_id) != previous:
                return False
            if previous_sealed is not None and records.get(previous) is not previous_sealed:
                return False

            records[token] = sealed
            if demoted is not None:
                records[previous] = demoted
            if default:
                self._defaults[customer_id] = token
            elif previous == token:
                del self._defaults[customer_id]
            return True

    def _seal(self, token: PaymentToken) -> EncryptedData:
        return self.encryption.encrypt(json.dumps(token.to_datastore_format()))

    def _unseal(self, token: str, sealed: EncryptedData) -> PaymentToken:
        data = json.loads(self.encryption.decrypt(sealed))
        return PaymentToken(token, data, type_name_filters=self.type_name_filters)
