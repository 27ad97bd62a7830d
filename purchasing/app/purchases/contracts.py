"""Collaborator contracts the purchase orchestrator depends on."""
from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable, Optional, Protocol, Set

from ..coupons.models import Coupon

if TYPE_CHECKING:  # pragma: no cover
    from ..transactions.models import Transaction
    from .models import BillingFrequency, Invoice, Plan, PurchaseAttempt


class Host(Protocol):
    """Resource a package is provisioned onto."""

    id: Any


class ManagedSubscription(Protocol):
    """Recurring billing state attached to a package purchase."""

    id: Any
    billing_frequency: "BillingFrequency"
    plan: "Plan"

    def renew(self) -> "Invoice":
        ...

    def switch_frequency(self, plan: "Plan") -> "Invoice":
        ...

    def on_trial(self) -> bool:
        ...

    def cancel_and_refund(self, attempt: "PurchaseAttempt", price: Decimal) -> Decimal:
        """Cancel the subscription and return ``price`` net of its refundable credit."""


class PackagePurchase(Protocol):
    """Durable record that a package is active on a host."""

    id: Any
    name: Optional[str]
    active: bool
    subscription: Optional[ManagedSubscription]

    def subscribe(self, attempt: "PurchaseAttempt") -> ManagedSubscription:
        ...

    def unsubscribe(self) -> None:
        ...


class PurchasablePackage(Protocol):
    """Product sold on a host; owns at most one active purchase per host."""

    id: Any
    name: str
    descriptor: str
    purchase: Optional[PackagePurchase]

    def validate(self, host: Host, user: Optional["PurchaseUser"], for_purchase: bool) -> Optional[Host]:
        """Return the host to use, or ``None`` to keep the requested one."""

    def prepare(self, host: Host, plan: "Plan") -> None:
        ...

    def set_purchase(self, host: Host, for_purchase: bool) -> PackagePurchase:
        ...

    def activate(self, host: Host, plan: "Plan") -> None:
        ...

    def is_in_use(self, host: Host) -> bool:
        ...

    def trial_consumed(self, host: Host) -> bool:
        ...

    def previous_subscription(self, host: Host) -> Optional[ManagedSubscription]:
        """Subscription that a purchase on ``host`` supersedes, if any."""


class PurchaseUser(Protocol):
    """Buyer whose balance and coupons the orchestrator adjusts."""

    id: Any
    balance: Decimal
    payment_gateway: Optional[str]

    def get_coupons(self) -> Set[str]:
        ...

    def remove_coupons(self, discounts: Iterable[Coupon]) -> None:
        ...

    def add_coupons(self, coupons: Iterable[Coupon], plan: "Plan", host: Host) -> None:
        ...

    def save(self) -> None:
        ...


class PurchaseEventSink(Protocol):
    """Receives notifications about purchase outcomes."""

    def purchase_failed(self, attempt: "PurchaseAttempt", transaction: "Transaction") -> None:
        ...
