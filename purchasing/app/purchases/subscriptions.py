"""Subscription lifecycle steps run after a payment attempt."""
from __future__ import annotations

from typing import Optional

from .contracts import ManagedSubscription
from .models import PurchaseAttempt


def subscribe(attempt: PurchaseAttempt) -> ManagedSubscription:
    """Start or extend the subscription of the package purchase."""

    return attempt.package.purchase.subscribe(attempt)


def unsubscribe(attempt: PurchaseAttempt) -> None:
    """Complete any active subscription for the attempt's package and host."""

    attempt.package.purchase.unsubscribe()


def process_subscription(attempt: PurchaseAttempt) -> Optional[ManagedSubscription]:
    """Create, extend, cancel, or merely reference the attempt's subscription."""

    if attempt.payment_cleared:
        if attempt.plan.is_recurring:
            attempt.subscription = subscribe(attempt)
        else:
            unsubscribe(attempt)

    # A failed recurring charge still links its transaction to the
    # subscription it was meant to affect.
    elif attempt.plan.is_recurring and attempt.subscription is None:
        purchase = attempt.package.purchase
        attempt.subscription = purchase.subscription if purchase is not None else None

    return attempt.subscription
