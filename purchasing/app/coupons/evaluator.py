"""Coupon redemption rules."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Set, Tuple

from .models import Coupon, CouponRedeemType


class CouponHolder(Protocol):
    """Actor whose personal coupon set is consulted for internal coupons."""

    def get_coupons(self) -> Set[str]:
        ...


def _redeem_type(value: object) -> Optional[CouponRedeemType]:
    if isinstance(value, CouponRedeemType):
        return value
    try:
        return CouponRedeemType(str(value).strip().lower())
    except ValueError:
        return None


def evaluate_coupon(
    coupon: Coupon,
    actor: Optional[CouponHolder],
    request_coupon_code: Optional[str],
) -> Optional[Coupon]:
    """Return ``coupon`` when it is redeemable for ``actor``, otherwise ``None``."""

    redeem_type = _redeem_type(coupon.redeem)

    if redeem_type == CouponRedeemType.INTERNAL:
        if actor is not None and coupon.code in actor.get_coupons():
            return coupon
        return None

    if redeem_type == CouponRedeemType.MANUAL:
        if request_coupon_code is not None and coupon.code == request_coupon_code:
            return coupon
        return None

    if redeem_type == CouponRedeemType.AUTOREDEEM:
        return coupon

    return None


def resolve_discounts(
    coupons: Iterable[Coupon],
    actor: Optional[CouponHolder],
    request_coupon_code: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> Tuple[Coupon, ...]:
    """Return the coupons that apply to a purchase, in plan order.

    Expired and exhausted coupons are skipped before the redeem rules run.
    """

    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    discounts = []
    for coupon in coupons:
        if coupon.is_expired(moment) or coupon.is_exhausted():
            continue
        applicable = evaluate_coupon(coupon, actor, request_coupon_code)
        if applicable is not None:
            discounts.append(applicable)
    return tuple(discounts)


def coupon_discount(price: Decimal, discounts: Iterable[Coupon]) -> Decimal:
    """Total discount granted by ``discounts``, never more than ``price``."""

    remaining = price
    total = Decimal("0")
    for coupon in discounts:
        value = coupon.discount_for(remaining)
        total += value
        remaining -= value
    return total
