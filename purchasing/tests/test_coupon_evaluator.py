"""Unit tests for coupon redemption rules."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from purchasing.app.coupons import (
    Coupon,
    CouponRedeemType,
    DiscountType,
    coupon_discount,
    evaluate_coupon,
    resolve_discounts,
)
from purchasing.app.purchases import Plan
from purchasing.tests.fakes import FakeHost, FakePackage, FakeUser, build_orchestrator


NOW = datetime(2026, 5, 1, tzinfo=timezone.utc)


def test_internal_coupon_requires_user_to_hold_code() -> None:
    coupon = Coupon(code="LOYAL", redeem=CouponRedeemType.INTERNAL, amount=Decimal("5"))

    assert evaluate_coupon(coupon, FakeUser(coupons={"LOYAL"}), None) is coupon
    assert evaluate_coupon(coupon, FakeUser(coupons={"OTHER"}), "LOYAL") is None
    assert evaluate_coupon(coupon, None, None) is None


def test_manual_coupon_requires_matching_request_code() -> None:
    coupon = Coupon(code="SPRING", redeem=CouponRedeemType.MANUAL, amount=Decimal("5"))

    assert evaluate_coupon(coupon, None, "SPRING") is coupon
    assert evaluate_coupon(coupon, FakeUser(coupons={"SPRING"}), None) is None
    assert evaluate_coupon(coupon, None, "spring") is None


def test_autoredeem_coupon_always_applies() -> None:
    coupon = Coupon(code="WELCOME", redeem="autoredeem", amount=Decimal("1"))

    assert evaluate_coupon(coupon, None, None) is coupon


@pytest.mark.parametrize("redeem", [None, "", "legacy", 7])
def test_unknown_redeem_type_is_never_redeemable(redeem) -> None:
    coupon = Coupon(code="ODD", redeem=redeem, amount=Decimal("1"))

    assert evaluate_coupon(coupon, FakeUser(coupons={"ODD"}), "ODD") is None


def test_resolve_discounts_keeps_plan_order_and_skips_unusable_coupons() -> None:
    auto = Coupon(code="AUTO", redeem=CouponRedeemType.AUTOREDEEM, amount=Decimal("1"))
    expired = Coupon(
        code="OLD",
        redeem=CouponRedeemType.AUTOREDEEM,
        amount=Decimal("1"),
        expires_at=NOW - timedelta(days=1),
    )
    exhausted = Coupon(
        code="GONE",
        redeem=CouponRedeemType.AUTOREDEEM,
        amount=Decimal("1"),
        max_redemptions=3,
        times_redeemed=3,
    )
    manual = Coupon(code="CODE", redeem=CouponRedeemType.MANUAL, amount=Decimal("2"))

    discounts = resolve_discounts([manual, expired, auto, exhausted], None, "CODE", now=NOW)

    assert discounts == (manual, auto)


def test_coupon_discount_applies_coupons_to_remaining_price() -> None:
    half = Coupon(code="HALF", discount_type=DiscountType.PERCENTAGE, amount=Decimal("50"))
    ten = Coupon(code="TEN", discount_type=DiscountType.FIXED_AMOUNT, amount=Decimal("10"))

    assert coupon_discount(Decimal("40"), [half, ten]) == Decimal("30")
    assert coupon_discount(Decimal("15"), [half, ten]) == Decimal("15")
    assert coupon_discount(Decimal("15"), []) == Decimal("0")


def test_naive_expiry_is_treated_as_utc() -> None:
    future = Coupon(code="LATER", redeem=CouponRedeemType.AUTOREDEEM, expires_at=datetime(2099, 1, 1))
    parsed = Coupon.model_validate(
        {"code": "PAST", "redeem": "autoredeem", "expires_at": "2026-04-30T00:00:00"}
    )

    assert future.expires_at.tzinfo is timezone.utc
    assert parsed.expires_at == datetime(2026, 4, 30, tzinfo=timezone.utc)
    assert resolve_discounts([future, parsed], None, now=NOW) == (future,)
    assert resolve_discounts([future, parsed], None, now=datetime(2026, 4, 1)) == (future, parsed)


def test_naive_expiry_does_not_break_purchases() -> None:
    coupon = Coupon(
        code="AUTO",
        redeem=CouponRedeemType.AUTOREDEEM,
        amount=Decimal("5"),
        expires_at=datetime(2099, 1, 1),
    )
    plan = Plan(package=FakePackage("pro"), price=Decimal("30"), coupons=(coupon,))
    orchestrator, _, processor, _ = build_orchestrator()

    invoice = orchestrator.purchase(plan, FakeHost("host-1"), FakeUser())

    assert invoice.discount == Decimal("5")
    assert processor.charges[0][0] == Decimal("25")
