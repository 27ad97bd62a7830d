"""Price breakdown for a purchase attempt."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..coupons.evaluator import coupon_discount, resolve_discounts
from .contracts import PurchaseUser
from .models import Plan, PlanPricing


def resolve_pricing(
    plan: Plan,
    user: Optional[PurchaseUser],
    request_coupon_code: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> PlanPricing:
    """Apply redeemable coupons and then the user's balance to the plan price."""

    discounts = resolve_discounts(plan.coupons, user, request_coupon_code, now=now)
    price = plan.price
    discount_from_coupons = coupon_discount(price, discounts)

    balance = user.balance if user is not None else Decimal("0")
    remaining = price - discount_from_coupons
    balance_discount = min(max(balance, Decimal("0")), remaining)

    return PlanPricing(
        price=price,
        coupon_discount=discount_from_coupons,
        balance_discount=balance_discount,
        discounts=discounts,
    )
