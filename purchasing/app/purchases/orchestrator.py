"""Decides how a plan is purchased on a host and drives the purchase through."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional

from ..payments.models import PaymentResult
from ..payments.processor import PaymentProcessor, PaymentProcessorError
from .contracts import Host, ManagedSubscription, PurchaseUser
from .ledger import refund_to_user_balance
from .locks import PurchaseLocks
from .models import BundledPurchaseResult, Invoice, Plan, PurchaseAttempt, attempt_summary
from .pricing import resolve_pricing
from .recorder import TransactionRecorder
from .subscriptions import process_subscription
from .trial import calculate_trial

logger = logging.getLogger(__name__)


class PurchaseOrchestrator:
    """Chooses between a new sale, renewal, frequency switch, or reactivation.

    Purchases of one package on one host are serialized through ``locks``,
    keyed on the host returned by ``package.validate``. Bundled plans are
    bought after the primary lock is released.
    """

    def __init__(
        self,
        processor: PaymentProcessor,
        recorder: TransactionRecorder,
        *,
        locks: Optional[PurchaseLocks] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._processor = processor
        self._recorder = recorder
        self._locks = locks if locks is not None else PurchaseLocks()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def purchase(
        self,
        plan: Plan,
        host: Host,
        user: Optional[PurchaseUser],
        *,
        request_coupon_code: Optional[str] = None,
        renew: bool = False,
    ) -> Optional[Invoice]:
        """Purchase ``plan`` on ``host`` for ``user``.

        Returns ``None`` when there is no user to charge. Raises
        :class:`PaymentFailedError` when the payment is declined.
        """

        attempt = PurchaseAttempt(
            plan=plan,
            host=host,
            user=user,
            request_coupon_code=request_coupon_code,
            in_renew_mode=renew,
        )

        if attempt.in_renew_mode:
            with self._locks.hold(attempt.package.id, attempt.host.id):
                attempt.pricing = resolve_pricing(plan, user, request_coupon_code, now=self._clock())
                return self.make_purchase(attempt)

        self.resolve_host(attempt, for_purchase=True)
        with self._locks.hold(attempt.package.id, attempt.host.id):
            subscription = self._prepare_on_host(attempt, for_purchase=True)
            existing = self._continue_existing(attempt, subscription)
            if existing is not None:
                return existing
            invoice = self.make_purchase(attempt)

        if invoice is None:
            return None

        for result in self.purchase_additional_plans(attempt):
            # Bundled plans are best effort and never fail the primary purchase.
            if result.succeeded:
                invoice.additional_invoices.append(result.invoice)
        return invoice

    def preview(
        self,
        plan: Plan,
        host: Host,
        user: Optional[PurchaseUser],
        *,
        request_coupon_code: Optional[str] = None,
    ) -> Plan:
        """Plan to show the user: the current subscription's plan when it bills at the same frequency."""

        attempt = PurchaseAttempt(plan=plan, host=host, user=user, request_coupon_code=request_coupon_code)
        subscription = self.prepare(attempt, for_purchase=False)
        if subscription is not None and subscription.billing_frequency == plan.billing_frequency:
            return subscription.plan
        return plan

    def prepare(self, attempt: PurchaseAttempt, *, for_purchase: bool) -> Optional[ManagedSubscription]:
        """Resolve host, trial, pricing, and existing subscriptions for the attempt."""

        self.resolve_host(attempt, for_purchase=for_purchase)
        return self._prepare_on_host(attempt, for_purchase=for_purchase)

    def resolve_host(self, attempt: PurchaseAttempt, *, for_purchase: bool) -> Host:
        """Swap in the host chosen by ``package.validate``, if it returns one."""

        validated_host = attempt.package.validate(attempt.host, attempt.user, for_purchase)
        if validated_host is not None:
            attempt.host = validated_host
        return attempt.host

    def _prepare_on_host(self, attempt: PurchaseAttempt, *, for_purchase: bool) -> Optional[ManagedSubscription]:
        plan = attempt.plan
        package = attempt.package

        package.prepare(attempt.host, plan)
        calculate_trial(plan, attempt.host)
        attempt.pricing = resolve_pricing(plan, attempt.user, attempt.request_coupon_code, now=self._clock())

        purchase = package.set_purchase(attempt.host, for_purchase)
        subscription = purchase.subscription if purchase is not None else None
        attempt.previous_subscription = package.previous_subscription(attempt.host)
        return subscription

    def _continue_existing(
        self,
        attempt: PurchaseAttempt,
        subscription: Optional[ManagedSubscription],
    ) -> Optional[Invoice]:
        """Renew, switch, or reactivate; ``None`` when a new sale is needed."""

        plan = attempt.plan
        package = attempt.package

        if subscription is not None:
            if not plan.is_recurring:
                return None
            if package.is_in_use(attempt.host):
                if subscription.billing_frequency == plan.billing_frequency:
                    logger.info("Renewing subscription %s", subscription.id)
                    return subscription.renew()

                logger.info(
                    "Switching subscription %s to %s billing",
                    subscription.id,
                    plan.billing_frequency.value,
                )
                return subscription.switch_frequency(plan)

            if not subscription.on_trial():
                return self.use_existing_purchase(attempt)
            return None

        if package.purchase is not None and package.purchase.active:
            return self.use_existing_purchase(attempt)
        return None

    def purchase_additional_plans(self, attempt: PurchaseAttempt) -> List[BundledPurchaseResult]:
        """Purchase the plan's bundled plans on the same host, in order."""

        results: List[BundledPurchaseResult] = []
        for additional_plan in attempt.plan.additional_plans:
            try:
                invoice = self.purchase(
                    additional_plan,
                    attempt.host,
                    attempt.user,
                    request_coupon_code=attempt.request_coupon_code,
                )
            except Exception as exc:
                logger.debug("Bundled plan for %s not purchased: %s", additional_plan.package.name, exc)
                results.append(BundledPurchaseResult(plan=additional_plan, error=exc))
                continue
            results.append(BundledPurchaseResult(plan=additional_plan, invoice=invoice))
        return results

    def make_purchase(self, attempt: PurchaseAttempt) -> Optional[Invoice]:
        if attempt.user is None:
            logger.debug("No user for purchase of %s, skipping", attempt.package.name)
            return None

        amount = Decimal("0") if attempt.has_trial else attempt_summary(attempt)
        attempt.payment = self._charge(attempt, amount)
        return self.process_purchase(attempt)

    def process_purchase(self, attempt: PurchaseAttempt) -> Invoice:
        plan = attempt.plan
        package = attempt.package
        user = attempt.user

        refund_to_user_balance(attempt)

        if attempt.payment_cleared:
            package.activate(attempt.host, plan)
            user.remove_coupons(attempt.discounts)

        if attempt.payment_succeeded:
            user.add_coupons(plan.addon_coupons, plan, attempt.host)

        process_subscription(attempt)

        return self._recorder.create_transaction(attempt)

    def use_existing_purchase(self, attempt: PurchaseAttempt) -> Invoice:
        """Reactivate the package's existing purchase and return its last invoice."""

        attempt.reused_existing_purchase = True
        attempt.package.activate(attempt.host, attempt.plan)

        if attempt.previous_subscription is not None:
            attempt.previous_subscription.cancel_and_refund(attempt, Decimal("0"))

        logger.info("Reusing existing purchase of %s", attempt.package.name)
        transaction = self._recorder.latest_successful_transaction(attempt)
        return self._recorder.invoice_for(attempt, transaction)

    def _charge(self, attempt: PurchaseAttempt, amount: Decimal) -> Optional[PaymentResult]:
        if amount <= 0:
            return None
        try:
            return self._processor.charge(amount, attempt.package.descriptor, user=attempt.user)
        except (PaymentProcessorError, TimeoutError) as exc:
            logger.warning("Payment processor error for %s: %s", attempt.package.name, exc)
            return PaymentResult(successful=False, message=str(exc) or type(exc).__name__)
