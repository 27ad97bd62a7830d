"""Tests for normalizing gateway payloads into payment methods."""
from __future__ import annotations

from purchasing.app.payments import (
    BraintreePaymentMethodParser,
    BraintreeTransactionPayload,
    CreditCardDetails,
    PayPalDetails,
    SandboxTransactionPayload,
    default_parsers,
    deserialize_gateway_payload,
    parse_payment_method,
    serialize_gateway_payload,
)


def test_paypal_account_uses_payer_email_as_description() -> None:
    payload = BraintreeTransactionPayload(
        paypal_details=PayPalDetails(image_url="https://assets.test/paypal.png", payer_email="ana@example.com"),
    )

    method = parse_payment_method(payload, default_parsers())

    assert method is not None
    assert method.type == "paypal_account"
    assert method.email == "ana@example.com"
    assert method.description == "ana@example.com"
    assert method.image_url == "https://assets.test/paypal.png"


def test_credit_card_description_uses_configured_phrase() -> None:
    payload = BraintreeTransactionPayload(
        credit_card_details=CreditCardDetails(
            bin="411111",
            last4="1111",
            card_type="Visa",
            expiration_month="04",
            expiration_year="2029",
        ),
    )

    method = parse_payment_method(payload, default_parsers(card_ending_phrase="terminando en"))

    assert method is not None
    assert method.type == "credit_card"
    assert method.description == "Visa terminando en 1111"
    assert (method.expiration_month, method.expiration_year) == ("04", "2029")


def test_paypal_details_take_precedence_over_card() -> None:
    payload = BraintreeTransactionPayload(
        paypal_details=PayPalDetails(payer_email="ana@example.com"),
        credit_card_details=CreditCardDetails(last4="1111", card_type="Visa"),
    )

    assert BraintreePaymentMethodParser().parse(payload).type == "paypal_account"


def test_payload_without_method_details_yields_none() -> None:
    assert parse_payment_method(BraintreeTransactionPayload(transaction_id="bt_1"), default_parsers()) is None
    assert parse_payment_method(None, default_parsers()) is None


def test_unregistered_family_yields_none() -> None:
    payload = SandboxTransactionPayload(reference="sbx_1")

    assert parse_payment_method(payload, default_parsers()) is None


def test_stored_payload_uses_gateway_field_names() -> None:
    payload = BraintreeTransactionPayload(
        transaction_id="bt_1",
        credit_card_details=CreditCardDetails(last4="4242", card_type="Mastercard"),
    )

    data = serialize_gateway_payload(payload)

    assert '"creditCardDetails"' in data
    assert '"cardType":"Mastercard"' in data
    assert deserialize_gateway_payload(data) == payload
    assert isinstance(deserialize_gateway_payload('{"family": "sandbox", "reference": "sbx_2"}'), SandboxTransactionPayload)
