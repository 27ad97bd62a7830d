"""User balance adjustments made while processing a purchase."""
from __future__ import annotations

import logging
from decimal import Decimal

from .models import PurchaseAttempt

logger = logging.getLogger(__name__)


def apply_balance_charge(balance: Decimal, price: Decimal) -> Decimal:
    """Deduct ``price`` from ``balance``; shortfalls are absorbed at zero."""

    updated = balance - price
    if updated < 0:
        return Decimal("0")
    return updated


def refund_to_user_balance(attempt: PurchaseAttempt) -> None:
    """Settle the user's balance against the attempt's price.

    A superseded subscription captured during preparation is cancelled here
    and its refundable credit netted into the price. The adjustment is not
    reverted when the payment later fails.
    """

    if attempt.has_trial or attempt.user is None:
        return

    pricing = attempt.pricing
    price = pricing.price - pricing.coupon_discount if pricing else attempt.plan.price

    if attempt.previous_subscription is not None:
        price = attempt.previous_subscription.cancel_and_refund(attempt, price)

    user = attempt.user
    previous_balance = user.balance
    user.balance = apply_balance_charge(previous_balance, price)
    user.save()

    logger.debug(
        "Balance settled user=%s before=%s charged=%s after=%s",
        user.id,
        previous_balance,
        price,
        user.balance,
    )
