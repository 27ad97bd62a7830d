"""Domain models for coupons and discounts."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CouponRedeemType(str, Enum):
    """How a coupon becomes applicable to a purchase."""

    INTERNAL = "internal"
    MANUAL = "manual"
    AUTOREDEEM = "autoredeem"


class DiscountType(str, Enum):
    """Discount rule applied by a coupon."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class Coupon(BaseModel):
    """Discount descriptor attached to a plan or issued to a user."""

    code: str
    # Raw value so that unknown redeem types survive loading and resolve to
    # "not redeemable" instead of failing validation.
    redeem: Union[CouponRedeemType, str, int, None] = None
    discount_type: DiscountType = DiscountType.FIXED_AMOUNT
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    expires_at: Optional[datetime] = None
    max_redemptions: Optional[int] = Field(default=None, ge=0)
    times_redeemed: int = Field(default=0, ge=0)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("expires_at")
    @classmethod
    def _utc_expiry(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=timezone.utc)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    def is_exhausted(self) -> bool:
        return self.max_redemptions is not None and self.times_redeemed >= self.max_redemptions

    def discount_for(self, price: Decimal) -> Decimal:
        """Return the amount this coupon takes off ``price``."""

        if self.discount_type == DiscountType.PERCENTAGE:
            value = price * self.amount / Decimal("100")
        else:
            value = self.amount
        return min(max(value, Decimal("0")), price)
