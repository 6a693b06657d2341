import pytest


@pytest.fixture(autouse=True)
def clean_type_name_filters():
    """Every test starts and ends with no module-wide type name filters."""
    from payment_gateway.tokens import reset_type_name_filters

    reset_type_name_filters()
    yield
    reset_type_name_filters()


@pytest.fixture
def card_attributes():
    return {
        "default": True,
        "type": "visa",
        "last_four": "4242",
        "exp_month": "01",
        "exp_year": "2027",
    }


@pytest.fixture
def echeck_attributes():
    return {
        "type": "echeck",
        "last_four": "6789",
    }
