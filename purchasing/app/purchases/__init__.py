"""Purchase orchestration: plans, attempts, and the steps that complete them."""

from .contracts import (
    Host,
    ManagedSubscription,
    PackagePurchase,
    PurchasablePackage,
    PurchaseEventSink,
    PurchaseUser,
)
from .exceptions import PaymentFailedError, PurchaseError
from .ledger import apply_balance_charge, refund_to_user_balance
from .locks import PurchaseLocks
from .models import (
    BillingFrequency,
    BundledPurchaseResult,
    Invoice,
    Plan,
    PlanPricing,
    PurchaseAttempt,
)
from .orchestrator import PurchaseOrchestrator
from .pricing import resolve_pricing
from .recorder import TransactionRecorder, TransactionRepository
from .subscriptions import process_subscription
from .trial import calculate_trial

__all__ = [
    "BillingFrequency",
    "BundledPurchaseResult",
    "Host",
    "Invoice",
    "ManagedSubscription",
    "PackagePurchase",
    "PaymentFailedError",
    "Plan",
    "PlanPricing",
    "PurchasablePackage",
    "PurchaseAttempt",
    "PurchaseError",
    "PurchaseEventSink",
    "PurchaseLocks",
    "PurchaseOrchestrator",
    "PurchaseUser",
    "TransactionRecorder",
    "TransactionRepository",
    "apply_balance_charge",
    "calculate_trial",
    "process_subscription",
    "refund_to_user_balance",
    "resolve_pricing",
]
