"""Domain models for purchase attempts, plans, and invoices."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..coupons.models import Coupon
from ..payments.models import PaymentMethod, PaymentResult
from ..transactions.models import Transaction, as_identifier

if TYPE_CHECKING:  # pragma: no cover
    from .contracts import Host, ManagedSubscription, PurchasablePackage, PurchaseUser


class BillingFrequency(str, Enum):
    """How often a plan is billed."""

    ONE_TIME = "one_time"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass
class Plan:
    """Purchasable offer for a package.

    ``trial_days`` is finalized by :func:`calculate_trial` for each attempt.
    """

    package: "PurchasablePackage"
    price: Decimal
    billing_frequency: BillingFrequency = BillingFrequency.ONE_TIME
    trial_days: int = 0
    recurring: bool = False
    currency: Optional[str] = None
    coupons: Tuple[Coupon, ...] = ()
    addon_coupons: Tuple[Coupon, ...] = ()
    additional_plans: List["Plan"] = field(default_factory=list)

    @property
    def is_recurring(self) -> bool:
        return self.recurring


class PlanPricing(BaseModel):
    """Price breakdown resolved for one purchase attempt."""

    price: Decimal
    coupon_discount: Decimal = Decimal("0")
    balance_discount: Decimal = Decimal("0")
    discounts: Tuple[Coupon, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def discount(self) -> Decimal:
        return self.coupon_discount + self.balance_discount

    @property
    def summary(self) -> Decimal:
        return self.price - self.discount


@dataclass
class PurchaseAttempt:
    """Mutable state carried through a single ``purchase`` call."""

    plan: Plan
    host: "Host"
    user: Optional["PurchaseUser"]
    request_coupon_code: Optional[str] = None
    in_renew_mode: bool = False
    pricing: Optional[PlanPricing] = None
    payment: Optional[PaymentResult] = None
    subscription: Optional["ManagedSubscription"] = None
    previous_subscription: Optional["ManagedSubscription"] = None
    reused_existing_purchase: bool = False

    @property
    def package(self) -> "PurchasablePackage":
        return self.plan.package

    @property
    def has_trial(self) -> bool:
        return self.plan.trial_days > 0 and not self.in_renew_mode

    @property
    def payment_cleared(self) -> bool:
        """``True`` when no payment was needed or the payment succeeded."""

        return self.payment is None or self.payment.successful

    @property
    def payment_succeeded(self) -> bool:
        return self.payment is not None and self.payment.successful

    @property
    def discounts(self) -> Tuple[Coupon, ...]:
        return self.pricing.discounts if self.pricing else ()


class Invoice(BaseModel):
    """User-facing receipt composed from an attempt and its transaction."""

    package_name: str
    host_id: Optional[str] = None
    billing_frequency: BillingFrequency = BillingFrequency.ONE_TIME
    trial_days: int = 0
    price: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    summary: Decimal = Decimal("0")
    currency: str = Field(min_length=3, max_length=3)
    reused_existing_purchase: bool = False
    transaction: Transaction
    payment_method: Optional[PaymentMethod] = None
    additional_invoices: List["Invoice"] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_attempt(
        cls,
        attempt: PurchaseAttempt,
        transaction: Transaction,
        *,
        currency: str,
        payment_method: Optional[PaymentMethod] = None,
    ) -> "Invoice":
        pricing = attempt.pricing or PlanPricing(price=attempt.plan.price)
        return cls(
            package_name=attempt.package.name,
            host_id=as_identifier(getattr(attempt.host, "id", None)),
            billing_frequency=attempt.plan.billing_frequency,
            trial_days=attempt.plan.trial_days,
            price=pricing.price,
            discount=pricing.discount,
            summary=pricing.summary,
            currency=currency,
            reused_existing_purchase=attempt.reused_existing_purchase,
            transaction=transaction,
            payment_method=payment_method,
        )


@dataclass(frozen=True)
class BundledPurchaseResult:
    """Outcome of purchasing one bundled additional plan."""

    plan: Plan
    invoice: Optional[Invoice] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.invoice is not None


def attempt_summary(attempt: PurchaseAttempt) -> Decimal:
    pricing = attempt.pricing
    return pricing.summary if pricing else attempt.plan.price


__all__ = [
    "BillingFrequency",
    "BundledPurchaseResult",
    "Invoice",
    "Plan",
    "PlanPricing",
    "PurchaseAttempt",
    "attempt_summary",
]
