"""Domain models for purchase transactions."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import IntEnum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..coupons.models import Coupon
from ..payments.models import GatewayPayload, deserialize_gateway_payload


class TransactionStatus(IntEnum):
    """Persisted status of a purchase attempt."""

    PENDING = 0
    SUCCESS = 1
    FAILED = 2


class Transaction(BaseModel):
    """Append-only audit record of one purchase attempt.

    Instances are frozen; derive updated copies with ``model_copy``.
    Repositories only ever insert, so a persisted ``SUCCESS`` or ``FAILED``
    transaction is never changed afterwards.
    """

    id: Optional[int] = None
    name: Optional[str] = None
    purchase_id: Optional[str] = None
    subscription_id: Optional[str] = None
    user_id: Optional[str] = None
    gateway: Optional[str] = None
    price: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    summary: Decimal = Decimal("0")
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    coupons: Tuple[Coupon, ...] = ()
    data: Optional[str] = Field(default=None, exclude=True)
    reference: Optional[str] = None
    message: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value

    @property
    def is_final(self) -> bool:
        return self.status in {TransactionStatus.SUCCESS, TransactionStatus.FAILED}

    @property
    def discounts(self) -> Tuple[Coupon, ...]:
        return self.coupons

    def display_name(self, purchase_name: Optional[str] = None) -> Optional[str]:
        """Stored name, falling back to the purchase's name when blank."""

        return self.name or purchase_name

    def payload(self) -> Optional[GatewayPayload]:
        """Decode the stored gateway payload."""

        return deserialize_gateway_payload(self.data)

    @classmethod
    def from_subscription(cls, subscription: Any, user: Any) -> "Transaction":
        """Pending transaction pre-filled from an existing subscription."""

        return cls(
            purchase_id=as_identifier(subscription.purchase_id),
            subscription_id=as_identifier(subscription.id),
            user_id=as_identifier(user.id),
            gateway=user.payment_gateway,
            price=subscription.price,
            currency=subscription.currency,
            discount=subscription.discount,
            summary=subscription.summary,
            coupons=tuple(subscription.discounts),
        )


def as_identifier(value: Any) -> Optional[str]:
    """Normalize collaborator identifiers to the string form stored on transactions."""

    if value is None:
        return None
    return str(value)


def resolve_currency(transaction: Transaction, default_currency: str) -> str:
    """Transaction currency, falling back to the configured default."""

    return transaction.currency or default_currency
