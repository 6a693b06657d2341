"""
Payment token model.

A payment token is the processor-issued reference to a stored card or
bank account, plus the little we may keep about it: its type, last four
digits and (cards only) expiration date.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from ..shared.constants import CardType, TokenField
from .type_names import TypeNameFilters, type_to_name


class PaymentTokenError(Exception):
    """Base exception for payment token errors."""
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class MissingAttributeError(PaymentTokenError):
    """A token attribute was read that the token doesn't carry."""
    def __init__(self, attribute: str, token: Optional[str] = None):
        if token is None:
            message = f"Payment token data is missing '{attribute}'"
        else:
            message = f"Payment token {token} has no '{attribute}'"
        super().__init__(message, code="missing_attribute")
        self.attribute = attribute
        self.token = token


class InvalidAttributeError(PaymentTokenError):
    """A token attribute has a value of the wrong kind."""
    def __init__(self, attribute: str, value: Any, token: Optional[str] = None):
        if token is None:
            message = f"Payment token data has an invalid '{attribute}': {value!r}"
        else:
            message = f"Payment token {token} has an invalid '{attribute}': {value!r}"
        super().__init__(message, code="invalid_attribute")
        self.attribute = attribute
        self.value = value
        self.token = token


@dataclass(frozen=True)
class CardDetails:
    """Stored details of a credit card token."""
    type: str                        # visa, mc, amex, disc, diners, jcb, ...
    last_four: Optional[str] = None
    exp_month: Optional[str] = None  # Two digits, "01" - "12"
    exp_year: Optional[str] = None   # Four digits

    def __post_init__(self):
        if not isinstance(self.type, str):
            raise InvalidAttributeError(TokenField.TYPE.value, self.type)
        if self.type == CardType.ECHECK.value:
            raise ValueError("Use EcheckDetails for echeck tokens")


@dataclass(frozen=True)
class EcheckDetails:
    """Stored details of a bank account (eCheck) token."""
    last_four: Optional[str] = None

    @property
    def type(self) -> str:
        return CardType.ECHECK.value


TokenDetails = Union[CardDetails, EcheckDetails]

_CARD_KEYS = (TokenField.LAST_FOUR.value, TokenField.EXP_MONTH.value, TokenField.EXP_YEAR.value)


class PaymentToken:
    """
    A credit card or eCheck payment token.

    Built from the token string and its datastore attributes:

        token = PaymentToken("tok_8Hx2", {
            "default": True,
            "type": "visa",
            "last_four": "4242",
            "exp_month": "01",
            "exp_year": "2027",
        })

    Attribute keys with a None value are treated as absent. Keys the token
    doesn't model are kept untouched and written back by
    to_datastore_format().

    Reading an attribute the token doesn't carry (expiry of an eCheck,
    a missing last four) raises MissingAttributeError.
    """

    def __init__(
        self,
        token: str,
        attributes: Mapping[str, Any],
        type_name_filters: Optional[TypeNameFilters] = None,
    ):
        data = {key: value for key, value in attributes.items() if value is not None}

        payment_type = data.pop(TokenField.TYPE.value, None)
        if payment_type is None:
            raise MissingAttributeError(TokenField.TYPE.value, token)
        if not isinstance(payment_type, str):
            raise InvalidAttributeError(TokenField.TYPE.value, payment_type, token)

        default = data.pop(TokenField.DEFAULT.value, None)

        if payment_type == CardType.ECHECK.value:
            details = EcheckDetails(last_four=data.pop(TokenField.LAST_FOUR.value, None))
        else:
            details = CardDetails(
                type=payment_type,
                **{key: data.pop(key) for key in _CARD_KEYS if key in data},
            )

        self._token = token
        self._details: TokenDetails = details
        self._default: Any = default
        self._extra: Dict[str, Any] = data
        self._type_name_filters = type_name_filters

    @classmethod
    def from_details(
        cls,
        token: str,
        details: TokenDetails,
        default: Optional[bool] = None,
        extra: Optional[Mapping[str, Any]] = None,
        type_name_filters: Optional[TypeNameFilters] = None,
    ) -> "PaymentToken":
        """Build a token from already-typed details."""
        instance = cls.__new__(cls)
        instance._token = token
        instance._details = details
        instance._default = default
        instance._extra = dict(extra or {})
        instance._type_name_filters = type_name_filters
        return instance

    @property
    def token(self) -> str:
        return self._token

    @property
    def details(self) -> TokenDetails:
        return self._details

    def get_token(self) -> str:
        """Returns the payment token string."""
        return self._token

    def is_default(self) -> bool:
        """
        Datastores hand the flag back as a bool, an int or a string; the
        string "0" counts as not default, same as an empty one.
        """
        if isinstance(self._default, str):
            return self._default not in ("", "0")
        return bool(self._default)

    def set_default(self, default: bool) -> None:
        """
        Makes this payment token the default or a non-default one.

        Only this instance changes. Keeping a single default per customer
        is up to the caller (PaymentTokenStore does it).
        """
        self._default = default

    def is_credit_card(self) -> bool:
        return isinstance(self._details, CardDetails)

    def is_check(self) -> bool:
        return not self.is_credit_card()

    def get_type(self) -> str:
        """Returns the payment type (visa, mc, amex, disc, diners, jcb, echeck, etc)."""
        return self._details.type

    def get_type_full(self) -> str:
        """Returns the full payment type (Visa, MasterCard, American Express, eCheck, etc)."""
        return type_to_name(self.get_type(), self._type_name_filters)

    def get_last_four(self) -> str:
        return self._require(self._details.last_four, TokenField.LAST_FOUR.value)

    def get_exp_month(self) -> str:
        """Two-digit expiration month. Credit card tokens only."""
        return self._require(self._card_value(TokenField.EXP_MONTH.value), TokenField.EXP_MONTH.value)

    def get_exp_year(self) -> str:
        """Four-digit expiration year. Credit card tokens only."""
        return self._require(self._card_value(TokenField.EXP_YEAR.value), TokenField.EXP_YEAR.value)

    def get_exp_date(self) -> str:
        """Expiration date as MM/YY, ie '01/27'."""
        return f"{self.get_exp_month()}/{self.get_exp_year()[-2:]}"

    def to_datastore_format(self) -> Dict[str, Any]:
        """
        Returns a representation of this token suitable for persisting to a
        datastore. The result is a fresh dict; changing it doesn't change
        the token.
        """
        data: Dict[str, Any] = {}
        if self._default is not None:
            data[TokenField.DEFAULT.value] = self._default
        data[TokenField.TYPE.value] = self._details.type
        if self._details.last_four is not None:
            data[TokenField.LAST_FOUR.value] = self._details.last_four
        if isinstance(self._details, CardDetails):
            for key in (TokenField.EXP_MONTH.value, TokenField.EXP_YEAR.value):
                value = getattr(self._details, key)
                if value is not None:
                    data[key] = value
        data.update(self._extra)
        return data

    def _card_value(self, attribute: str) -> Optional[str]:
        if not isinstance(self._details, CardDetails):
            raise MissingAttributeError(attribute, self._token)
        return getattr(self._details, attribute)

    def _require(self, value: Optional[str], attribute: str) -> str:
        if value is None:
            raise MissingAttributeError(attribute, self._token)
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PaymentToken):
            return NotImplemented
        return (
            self._token == other._token
            and self._details == other._details
            and self.is_default() == other.is_default()
            and self._extra == other._extra
        )

    def __repr__(self) -> str:
        return (
            f"PaymentToken(token={self._token!r}, type={self._details.type!r}, "
            f"last_four={self._details.last_four!r}, default={self.is_default()})"
        )
