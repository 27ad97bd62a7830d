"""Coupon models and redemption rules."""

from .evaluator import CouponHolder, coupon_discount, evaluate_coupon, resolve_discounts
from .models import Coupon, CouponRedeemType, DiscountType

__all__ = [
    "Coupon",
    "CouponHolder",
    "CouponRedeemType",
    "DiscountType",
    "coupon_discount",
    "evaluate_coupon",
    "resolve_discounts",
]
