"""
Tests for payment tokens, type names and the token store.

Run with: python -m pytest tests/ -v
"""

import pytest


class TestTokenKinds:
    """Card vs eCheck classification."""

    def test_echeck_is_check(self, echeck_attributes):
        from payment_gateway.tokens import PaymentToken

        token = PaymentToken("tok_check", echeck_attributes)

        assert token.is_check()
        assert not token.is_credit_card()

    def test_other_types_are_credit_cards(self):
        from payment_gateway.tokens import PaymentToken

        for card_type in ["visa", "mc", "amex", "disc", "diners", "jcb", "some-brand"]:
            token = PaymentToken("tok_card", {"type": card_type, "last_four": "1111"})
            assert token.is_credit_card(), card_type
            assert not token.is_check(), card_type

    def test_accessors(self, card_attributes):
        from payment_gateway.tokens import PaymentToken

        token = PaymentToken("tok_8Hx2", card_attributes)

        assert token.get_token() == "tok_8Hx2"
        assert token.token == "tok_8Hx2"
        assert token.get_type() == "visa"
        assert token.get_type_full() == "Visa"
        assert token.get_last_four() == "4242"
        assert token.get_exp_month() == "01"
        assert token.get_exp_year() == "2027"
        assert token.get_exp_date() == "01/27"

    def test_token_is_read_only(self, card_attributes):
        from payment_gateway.tokens import PaymentToken

        token = PaymentToken("tok_8Hx2", card_attributes)

        with pytest.raises(AttributeError):
            token.token = "tok_other"


class TestDefaultFlag:
    """The default flag."""

    def test_fresh_token_is_not_default(self, echeck_attributes):
        from payment_gateway.tokens import PaymentToken

        token = PaymentToken("tok_check", echeck_attributes)

        assert not token.is_default()

    def test_set_default(self, echeck_attributes):
        from payment_gateway.tokens import PaymentToken

        token = PaymentToken("tok_check", echeck_attributes)

        token.set_default(True)
        assert token.is_default()

        token.set_default(False)
        assert not token.is_default()

    def test_falsy_default_attribute(self, card_attributes):
        from payment_gateway.tokens import PaymentToken

        card_attributes["default"] = 0
        token = PaymentToken("tok_8Hx2", card_attributes)

        assert not token.is_default()

    def test_string_flags_from_datastore(self, card_attributes):
        from payment_gateway.tokens import PaymentToken

        for stored, expected in [("0", False), ("", False), ("1", True), ("yes", True), (1, True)]:
            card_attributes["default"] = stored
            token = PaymentToken("tok_8Hx2", card_attributes)
            assert token.is_default() is expected, stored
            assert token.to_datastore_format()["default"] == stored


class TestMissingAttributes:
    """Reading attributes a token doesn't carry fails loudly."""

    def test_missing_type_rejected(self):
        from payment_gateway.tokens import PaymentToken, MissingAttributeError

        with pytest.raises(MissingAttributeError) as exc_info:
            PaymentToken("tok_bad", {"last_four": "1234"})

        assert exc_info.value.attribute == "type"
        assert exc_info.value.code == "missing_attribute"

    def test_non_string_type_rejected(self):
        from payment_gateway.tokens import PaymentToken, PaymentTokenError, InvalidAttributeError

        with pytest.raises(InvalidAttributeError) as exc_info:
            PaymentToken("tok_bad", {"type": 5, "last_four": "1234"})

        assert isinstance(exc_info.value, PaymentTokenError)
        assert exc_info.value.attribute == "type"
        assert exc_info.value.value == 5
        assert exc_info.value.code == "invalid_attribute"

    def test_card_details_reject_non_string_type(self):
        from payment_gateway.tokens import CardDetails, InvalidAttributeError

        with pytest.raises(InvalidAttributeError):
            CardDetails(type=["visa"])

    def test_echeck_has_no_expiry(self, echeck_attributes):
        from payment_gateway.tokens import PaymentToken, MissingAttributeError

        token = PaymentToken("tok_check", echeck_attributes)

        with pytest.raises(MissingAttributeError) as exc_info:
            token.get_exp_month()
        assert exc_info.value.attribute == "exp_month"
        assert exc_info.value.token == "tok_check"

        with pytest.raises(MissingAttributeError):
            token.get_exp_year()

        with pytest.raises(MissingAttributeError):
            token.get_exp_date()

    def test_card_without_last_four(self):
        from payment_gateway.tokens import PaymentToken, MissingAttributeError

        token = PaymentToken("tok_card", {"type": "mc"})

        with pytest.raises(MissingAttributeError):
            token.get_last_four()

    def test_none_values_treated_as_absent(self):
        from payment_gateway.tokens import PaymentToken, MissingAttributeError

        token = PaymentToken("tok_card", {"type": "mc", "exp_month": None})

        with pytest.raises(MissingAttributeError):
            token.get_exp_month()
        assert token.to_datastore_format() == {"type": "mc"}


class TestTypeNames:
    """Type code to display name translation."""

    def test_special_cases(self):
        from payment_gateway.tokens import type_to_name

        assert type_to_name("mc") == "MasterCard"
        assert type_to_name("amex") == "American Express"
        assert type_to_name("disc") == "Discover"
        assert type_to_name("jcb") == "JCB"
        assert type_to_name("cartebleue") == "CarteBleue"
        assert type_to_name("paypal") == "PayPal"
        assert type_to_name("echeck") == "eCheck"

    def test_fallback_capitalizes_words(self):
        from payment_gateway.tokens import type_to_name

        assert type_to_name("visa") == "Visa"
        assert type_to_name("diners") == "Diners"
        assert type_to_name("some-brand") == "Some Brand"
        assert type_to_name("carte-blanche-gold") == "Carte Blanche Gold"

    def test_fallback_keeps_inner_case(self):
        from payment_gateway.tokens import type_to_name

        assert type_to_name("maestro-UK") == "Maestro UK"
        assert type_to_name("eLO") == "ELO"

    def test_token_full_type(self, echeck_attributes):
        from payment_gateway.tokens import PaymentToken

        assert PaymentToken("tok_mc", {"type": "mc"}).get_type_full() == "MasterCard"
        assert PaymentToken("tok_amex", {"type": "amex"}).get_type_full() == "American Express"
        assert PaymentToken("tok_check", echeck_attributes).get_type_full() == "eCheck"
        assert PaymentToken("tok_x", {"type": "some-brand"}).get_type_full() == "Some Brand"


class TestTypeNameFilters:
    """Type name filter registration."""

    def test_filters_run_in_registration_order(self):
        from payment_gateway.tokens import register_type_name_filter, type_to_name

        seen = []

        def first(name, type_code):
            seen.append(("first", name, type_code))
            return name + " A"

        def second(name, type_code):
            seen.append(("second", name, type_code))
            return name + " B"

        register_type_name_filter(first)
        register_type_name_filter(second)

        assert type_to_name("visa") == "Visa A B"
        assert seen == [("first", "Visa", "visa"), ("second", "Visa A", "visa")]

    def test_filter_override_on_token(self):
        from payment_gateway.tokens import PaymentToken, register_type_name_filter

        @register_type_name_filter
        def rename_mastercard(name, type_code):
            return "Mastercard" if type_code == "mc" else name

        assert PaymentToken("tok_mc", {"type": "mc"}).get_type_full() == "Mastercard"
        assert PaymentToken("tok_amex", {"type": "amex"}).get_type_full() == "American Express"

    def test_token_specific_registry(self):
        from payment_gateway.tokens import (
            PaymentToken, TypeNameFilters, register_type_name_filter
        )

        register_type_name_filter(lambda name, type_code: "global")
        filters = TypeNameFilters()
        filters.register(lambda name, type_code: name.upper())

        token = PaymentToken("tok_mc", {"type": "mc"}, type_name_filters=filters)

        assert token.get_type_full() == "MASTERCARD"

    def test_unregister(self):
        from payment_gateway.tokens import TypeNameFilters, type_to_name

        filters = TypeNameFilters()

        def shout(name, type_code):
            return name.upper()

        filters.register(shout)
        assert len(filters) == 1
        assert type_to_name("jcb", filters) == "JCB"
        assert type_to_name("visa", filters) == "VISA"

        filters.unregister(shout)
        assert len(filters) == 0
        assert type_to_name("visa", filters) == "Visa"

        with pytest.raises(ValueError):
            filters.unregister(shout)

    def test_filter_errors_propagate(self):
        from payment_gateway.tokens import register_type_name_filter, type_to_name

        def broken(name, type_code):
            raise RuntimeError("boom")

        register_type_name_filter(broken)

        with pytest.raises(RuntimeError):
            type_to_name("visa")


class TestDatastoreFormat:
    """Persistence projection."""

    def test_returns_supplied_attributes(self, card_attributes):
        from payment_gateway.tokens import PaymentToken

        token = PaymentToken("tok_8Hx2", card_attributes)

        assert token.to_datastore_format() == card_attributes

    def test_reflects_set_default(self, card_attributes, echeck_attributes):
        from payment_gateway.tokens import PaymentToken

        card = PaymentToken("tok_8Hx2", card_attributes)
        card.set_default(False)
        assert card.to_datastore_format() == {**card_attributes, "default": False}

        check = PaymentToken("tok_check", echeck_attributes)
        check.set_default(True)
        assert check.to_datastore_format() == {**echeck_attributes, "default": True}

    def test_unmodeled_keys_preserved(self):
        from payment_gateway.tokens import PaymentToken

        attributes = {"type": "echeck", "last_four": "6789", "account_type": "checking"}
        token = PaymentToken("tok_check", attributes)

        assert token.to_datastore_format() == attributes

    def test_result_is_a_copy(self, card_attributes):
        from payment_gateway.tokens import PaymentToken

        token = PaymentToken("tok_8Hx2", card_attributes)

        data = token.to_datastore_format()
        data["last_four"] = "0000"
        data["default"] = False

        assert token.get_last_four() == "4242"
        assert token.is_default()

    def test_caller_attributes_not_aliased(self, card_attributes):
        from payment_gateway.tokens import PaymentToken

        token = PaymentToken("tok_8Hx2", card_attributes)
        card_attributes["type"] = "amex"
        token.set_default(False)

        assert token.get_type() == "visa"
        assert card_attributes["default"] is True

    def test_round_trip(self, card_attributes, echeck_attributes):
        from payment_gateway.tokens import PaymentToken

        for attributes in [card_attributes, echeck_attributes]:
            original = PaymentToken("tok_rt", attributes)
            copy = PaymentToken(original.get_token(), original.to_datastore_format())

            assert copy == original
            assert copy.get_token() == original.get_token()
            assert copy.is_default() == original.is_default()
            assert copy.is_credit_card() == original.is_credit_card()
            assert copy.get_type() == original.get_type()
            assert copy.get_type_full() == original.get_type_full()
            assert copy.get_last_four() == original.get_last_four()
            assert copy.to_datastore_format() == original.to_datastore_format()

    def test_from_details(self):
        from payment_gateway.tokens import PaymentToken, CardDetails, EcheckDetails

        card = PaymentToken.from_details(
            "tok_card",
            CardDetails(type="amex", last_four="0005", exp_month="12", exp_year="2030"),
            default=True,
        )
        assert card.to_datastore_format() == {
            "default": True,
            "type": "amex",
            "last_four": "0005",
            "exp_month": "12",
            "exp_year": "2030",
        }

        check = PaymentToken.from_details("tok_check", EcheckDetails(last_four="6789"))
        assert check.is_check()
        assert check.to_datastore_format() == {"type": "echeck", "last_four": "6789"}

    def test_card_details_reject_echeck(self):
        from payment_gateway.tokens import CardDetails

        with pytest.raises(ValueError):
            CardDetails(type="echeck")


class TestTokenStore:
    """Encrypted token store."""

    def test_save_and_get(self, card_attributes):
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore

        store = PaymentTokenStore()
        token = PaymentToken("tok_8Hx2", card_attributes)

        store.save("cus_1", token)
        loaded = store.get("cus_1", "tok_8Hx2")

        assert loaded == token
        assert loaded is not token

    def test_unknown_token(self):
        from payment_gateway.tokens import PaymentTokenStore, TokenNotFoundError

        store = PaymentTokenStore()

        with pytest.raises(TokenNotFoundError) as exc_info:
            store.get("cus_1", "tok_missing")
        assert exc_info.value.code == "token_not_found"

        with pytest.raises(TokenNotFoundError):
            store.delete("cus_1", "tok_missing")

        with pytest.raises(TokenNotFoundError):
            store.set_default("cus_1", "tok_missing")

    def test_tokens_scoped_by_customer(self, card_attributes):
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore, TokenNotFoundError

        store = PaymentTokenStore()
        store.save("cus_1", PaymentToken("tok_8Hx2", card_attributes))

        assert store.list("cus_2") == []
        with pytest.raises(TokenNotFoundError):
            store.get("cus_2", "tok_8Hx2")

    def test_single_default_per_customer(self, card_attributes, echeck_attributes):
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore

        store = PaymentTokenStore()
        store.save("cus_1", PaymentToken("tok_card", card_attributes))
        store.save("cus_1", PaymentToken("tok_check", echeck_attributes))

        assert store.get_default("cus_1").get_token() == "tok_card"

        store.set_default("cus_1", "tok_check")

        defaults = [t.get_token() for t in store.list("cus_1") if t.is_default()]
        assert defaults == ["tok_check"]

    def test_saving_default_clears_others(self, card_attributes):
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore

        store = PaymentTokenStore()
        store.save("cus_1", PaymentToken("tok_old", card_attributes))
        store.save("cus_1", PaymentToken("tok_new", {**card_attributes, "last_four": "4444"}))

        assert not store.get("cus_1", "tok_old").is_default()
        assert store.get("cus_1", "tok_new").is_default()

    def test_delete(self, card_attributes):
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore

        store = PaymentTokenStore()
        store.save("cus_1", PaymentToken("tok_8Hx2", card_attributes))
        store.delete("cus_1", "tok_8Hx2")

        assert store.list("cus_1") == []
        assert store.get_default("cus_1") is None

    def test_records_are_encrypted(self, card_attributes):
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore

        store = PaymentTokenStore()
        store.save("cus_1", PaymentToken("tok_8Hx2", card_attributes))

        sealed = store._records["cus_1"]["tok_8Hx2"]
        assert "last_four" not in sealed.ciphertext
        assert sealed.algorithm == "AES-256-GCM"

    def test_loaded_tokens_use_store_filters(self):
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore, TypeNameFilters

        filters = TypeNameFilters()
        filters.register(lambda name, type_code: f"{name} (saved)")
        store = PaymentTokenStore(type_name_filters=filters)
        store.save("cus_1", PaymentToken("tok_mc", {"type": "mc", "last_four": "4444"}))

        assert store.get("cus_1", "tok_mc").get_type_full() == "MasterCard (saved)"

    def test_crypto_runs_outside_the_lock(self, card_attributes, echeck_attributes):
        from payment_gateway.shared import EncryptionService
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore

        class RecordingEncryptionService(EncryptionService):
            store = None

            def encrypt(self, plaintext):
                self.calls.append(("encrypt", self.store._lock.locked()))
                return super().encrypt(plaintext)

            def decrypt(self, encrypted):
                self.calls.append(("decrypt", self.store._lock.locked()))
                return super().decrypt(encrypted)

        service = RecordingEncryptionService()
        service.calls = []
        store = PaymentTokenStore(encryption_service=service)
        service.store = store

        store.save("cus_1", PaymentToken("tok_card", card_attributes))
        store.save("cus_1", PaymentToken("tok_check", echeck_attributes))
        store.save("cus_1", PaymentToken("tok_mc", {"type": "mc", "last_four": "4444"}))
        service.calls.clear()

        store.set_default("cus_1", "tok_check")

        # Only the new and the previous default are opened and resealed
        assert [name for name, _ in service.calls].count("decrypt") == 2
        assert not any(locked for _, locked in service.calls)
        assert store.get_default("cus_1").get_token() == "tok_check"
        assert not store.get("cus_1", "tok_card").is_default()

    def test_default_tracking_follows_saves_and_deletes(self, card_attributes, echeck_attributes):
        from payment_gateway.tokens import PaymentToken, PaymentTokenStore

        store = PaymentTokenStore()
        store.save("cus_1", PaymentToken("tok_card", card_attributes))
        store.save("cus_1", PaymentToken("tok_check", echeck_attributes))

        store.save("cus_1", PaymentToken("tok_card", {**card_attributes, "default": False}))
        assert store.get_default("cus_1") is None

        store.set_default("cus_1", "tok_check")
        store.delete("cus_1", "tok_check")
        assert store.get_default("cus_1") is None

        store.set_default("cus_1", "tok_card")
        defaults = [t.get_token() for t in store.list("cus_1") if t.is_default()]
        assert defaults == ["tok_card"]
