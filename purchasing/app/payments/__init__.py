"""Payment processor contract, results, and payment method parsing."""

from .models import (
    BraintreeTransactionPayload,
    CreditCardDetails,
    GatewayPayload,
    PaymentMethod,
    PaymentResult,
    PayPalDetails,
    SandboxTransactionPayload,
    deserialize_gateway_payload,
    serialize_gateway_payload,
)
from .parser import (
    BraintreePaymentMethodParser,
    PaymentMethodParser,
    default_parsers,
    parse_payment_method,
)
from .processor import PaymentProcessor, PaymentProcessorError

__all__ = [
    "BraintreePaymentMethodParser",
    "BraintreeTransactionPayload",
    "CreditCardDetails",
    "GatewayPayload",
    "PaymentMethod",
    "PaymentMethodParser",
    "PaymentProcessor",
    "PaymentProcessorError",
    "PaymentResult",
    "PayPalDetails",
    "SandboxTransactionPayload",
    "default_parsers",
    "deserialize_gateway_payload",
    "parse_payment_method",
    "serialize_gateway_payload",
]
