"""Payment results and gateway payloads returned by payment processors."""
from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class PayPalDetails(BaseModel):
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    payer_email: Optional[str] = Field(default=None, alias="payerEmail")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CreditCardDetails(BaseModel):
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    bin: Optional[str] = None
    last4: Optional[str] = None
    card_type: Optional[str] = Field(default=None, alias="cardType")
    expiration_month: Optional[str] = Field(default=None, alias="expirationMonth")
    expiration_year: Optional[str] = Field(default=None, alias="expirationYear")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class BraintreeTransactionPayload(BaseModel):
    """Raw transaction details reported by Braintree-family gateways."""

    family: Literal["braintree"] = "braintree"
    transaction_id: Optional[str] = None
    paypal_details: Optional[PayPalDetails] = Field(default=None, alias="paypalDetails")
    credit_card_details: Optional[CreditCardDetails] = Field(default=None, alias="creditCardDetails")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SandboxTransactionPayload(BaseModel):
    """Payload emitted by the local sandbox processor."""

    family: Literal["sandbox"] = "sandbox"
    reference: str
    approved: bool = True

    model_config = ConfigDict(frozen=True)


GatewayPayload = Annotated[
    Union[BraintreeTransactionPayload, SandboxTransactionPayload],
    Field(discriminator="family"),
]

gateway_payload_adapter: TypeAdapter[GatewayPayload] = TypeAdapter(GatewayPayload)


def serialize_gateway_payload(payload: Optional[GatewayPayload]) -> Optional[str]:
    """Encode a gateway payload for the opaque transaction ``data`` column."""

    if payload is None:
        return None
    return gateway_payload_adapter.dump_json(payload, by_alias=True).decode("utf-8")


def deserialize_gateway_payload(data: Optional[str]) -> Optional[GatewayPayload]:
    if not data:
        return None
    return gateway_payload_adapter.validate_json(data)


class PaymentResult(BaseModel):
    """Outcome of a single charge attempt against a payment processor."""

    successful: bool
    amount: Decimal = Decimal("0")
    message: str = ""
    transaction_reference: Optional[str] = None
    data: Optional[GatewayPayload] = None

    model_config = ConfigDict(frozen=True)


class PaymentMethod(BaseModel):
    """Display-neutral description of how a transaction was paid."""

    type: Literal["paypal_account", "credit_card"]
    image_url: Optional[str] = None
    description: str
    email: Optional[str] = None
    bin: Optional[str] = None
    last4: Optional[str] = None
    card_type: Optional[str] = None
    expiration_month: Optional[str] = None
    expiration_year: Optional[str] = None

    model_config = ConfigDict(frozen=True)
