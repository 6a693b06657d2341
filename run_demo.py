#!/usr/bin/env python3
"""
Payment Gateway Framework Demo Runner

Walks through the framework's building blocks.

Usage:
    python run_demo.py          # Run all demos
    python run_demo.py tokens   # Payment tokens and the token store
    python run_demo.py api      # Request/response rendering
"""

import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))


def print_header(title):
    print("\n")
    print("=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_tokens():
    from payment_gateway.tokens import (
        PaymentToken, PaymentTokenStore, register_type_name_filter
    )

    card = PaymentToken("tok_8Hx2kf93", {
        "default": True,
        "type": "mc",
        "last_four": "4444",
        "exp_month": "03",
        "exp_year": "2028",
    })
    check = PaymentToken("tok_Jd02mQ7a", {"type": "echeck", "last_four": "6789"})

    for token in (card, check):
        print(f"\n{token.get_token()}:")
        print(f"   Type: {token.get_type_full()} ending in {token.get_last_four()}")
        if token.is_credit_card():
            print(f"   Expires: {token.get_exp_date()}")
        print(f"   Default: {token.is_default()}")

    print("\nStoring both tokens for customer cus_100...")
    store = PaymentTokenStore()
    store.save("cus_100", card)
    store.save("cus_100", check)

    store.set_default("cus_100", check.get_token())
    default = store.get_default("cus_100")
    print(f"   New default: {default.get_type_full()} ending in {default.get_last_four()}")
    print(f"   Card still default? {store.get('cus_100', card.get_token()).is_default()}")

    register_type_name_filter(lambda name, type_code: "Mastercard" if type_code == "mc" else name)
    print(f"\nWith a name filter, 'mc' shows as: {card.get_type_full()}")


def demo_api():
    from payment_gateway.api import ApplePayRequest, ApplePayResponse, JSONRequest

    request = JSONRequest(path="/v1/charges", data={
        "amount": 2499,
        "currency": "usd",
        "card_number": "4111111111111111",
        "cvv": "123",
    })
    print("\nCharge request:")
    print(f"   Full: {request.to_string()}")
    print(f"   Safe: {request.to_string_safe()}")

    validation = ApplePayRequest("https://apple-pay-gateway.apple.com/paymentservices/paymentSession")
    validation.set_merchant_data("merchant.com.example.shop", "shop.example.com", "Example Shop")
    print("\nApple Pay merchant validation request:")
    print(f"   Safe: {validation.to_string_safe()}")

    response = ApplePayResponse.from_body(
        '{"epochTimestamp": 1700000000000, "merchantSessionIdentifier": "SSH2E5B6C1D9F0A4", '
        '"displayName": "Example Shop", "signature": "308006092a864886f70d0107"}'
    )
    print("\nApple Pay merchant validation response:")
    print(f"   Success: {response.is_success()}")
    print(f"   Safe: {response.to_string_safe()}")

    failed = ApplePayResponse.from_body('{"statusCode": "400", "statusMessage": "Payment Services Exception"}')
    print(f"   Failure: {failed.get_status_code()} {failed.get_status_message()}")


DEMOS = {
    "tokens": ("Payment Tokens", demo_tokens),
    "api": ("API Requests and Responses", demo_api),
}


def main():
    from payment_gateway.shared import configure_logging

    configure_logging()

    selected = sys.argv[1:] or list(DEMOS)
    for name in selected:
        if name not in DEMOS:
            print(f"Unknown demo: {name}. Choose from: {', '.join(DEMOS)}")
            sys.exit(1)
        title, demo_func = DEMOS[name]
        print_header(title)
        demo_func()


if __name__ == "__main__":
    main()
