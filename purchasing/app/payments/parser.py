"""Normalize gateway payment details into :class:`PaymentMethod` values."""
from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol

from .models import (
    BraintreeTransactionPayload,
    CreditCardDetails,
    GatewayPayload,
    PaymentMethod,
    PayPalDetails,
)


class PaymentMethodParser(Protocol):
    """Adapter turning one gateway family's payload into a payment method."""

    def parse(self, payload: GatewayPayload) -> Optional[PaymentMethod]:
        ...


class BraintreePaymentMethodParser:
    """Parses PayPal account and credit card details from Braintree payloads."""

    def __init__(self, *, card_ending_phrase: str = "ending in") -> None:
        self._card_ending_phrase = card_ending_phrase

    def parse(self, payload: GatewayPayload) -> Optional[PaymentMethod]:
        if not isinstance(payload, BraintreeTransactionPayload):
            return None
        if payload.paypal_details is not None:
            return self.parse_paypal_account(payload.paypal_details)
        if payload.credit_card_details is not None:
            return self.parse_credit_card(payload.credit_card_details)
        return None

    def parse_paypal_account(self, details: PayPalDetails) -> PaymentMethod:
        return PaymentMethod(
            type="paypal_account",
            image_url=details.image_url,
            email=details.payer_email,
            description=details.payer_email or "",
        )

    def parse_credit_card(self, details: CreditCardDetails) -> PaymentMethod:
        return PaymentMethod(
            type="credit_card",
            image_url=details.image_url,
            bin=details.bin,
            last4=details.last4,
            card_type=details.card_type,
            expiration_month=details.expiration_month,
            expiration_year=details.expiration_year,
            description=f"{details.card_type} {self._card_ending_phrase} {details.last4}",
        )


def default_parsers(*, card_ending_phrase: str = "ending in") -> Dict[str, PaymentMethodParser]:
    """Parsers registered per gateway family."""

    return {"braintree": BraintreePaymentMethodParser(card_ending_phrase=card_ending_phrase)}


def parse_payment_method(
    payload: Optional[GatewayPayload],
    parsers: Mapping[str, PaymentMethodParser],
) -> Optional[PaymentMethod]:
    """Dispatch ``payload`` to the parser registered for its family."""

    if payload is None:
        return None
    parser = parsers.get(payload.family)
    if parser is None:
        return None
    return parser.parse(payload)
