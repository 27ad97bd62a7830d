"""Builds and persists the transaction for a completed purchase attempt."""
from __future__ import annotations

import logging
from typing import Mapping, Optional, Protocol

from ...config import PurchaseConfig
from ..payments.models import serialize_gateway_payload
from ..payments.parser import PaymentMethodParser, default_parsers, parse_payment_method
from ..transactions.models import Transaction, TransactionStatus, as_identifier, resolve_currency
from .contracts import PurchaseEventSink
from .exceptions import PaymentFailedError
from .models import Invoice, PurchaseAttempt, attempt_summary

logger = logging.getLogger(__name__)


class TransactionRepository(Protocol):
    """Persistence operations required by the transaction recorder."""

    def save_transaction(self, transaction: Transaction) -> Transaction:
        """Insert ``transaction`` and return the stored copy."""

    def latest_successful_transaction(self, purchase_id: str) -> Optional[Transaction]:
        """Most recent ``SUCCESS`` transaction for a purchase."""


class TransactionRecorder:
    """Turns a purchase attempt into a transaction record and an invoice."""

    def __init__(
        self,
        repository: TransactionRepository,
        event_sink: PurchaseEventSink,
        *,
        config: Optional[PurchaseConfig] = None,
        parsers: Optional[Mapping[str, PaymentMethodParser]] = None,
    ) -> None:
        self._repository = repository
        self._event_sink = event_sink
        self._config = config or PurchaseConfig()
        self._parsers = (
            parsers
            if parsers is not None
            else default_parsers(card_ending_phrase=self._config.card_ending_phrase)
        )

    def create_transaction(self, attempt: PurchaseAttempt) -> Invoice:
        """Record the attempt's outcome.

        Raises :class:`PaymentFailedError` after persisting a ``FAILED``
        transaction when the payment was declined.
        """

        transaction = self._base_transaction(attempt)

        payment = attempt.payment
        if payment is None:
            return self.invoice_for(attempt, transaction)

        transaction = transaction.model_copy(
            update={
                "data": serialize_gateway_payload(payment.data),
                "reference": payment.transaction_reference,
                "status": TransactionStatus.SUCCESS if payment.successful else TransactionStatus.FAILED,
                "message": payment.message,
                "summary": payment.amount if payment.successful else attempt_summary(attempt),
            }
        )
        transaction = self._repository.save_transaction(transaction)

        if not payment.successful:
            logger.info(
                "Payment failed purchase=%s transaction=%s message=%s",
                transaction.purchase_id,
                transaction.id,
                payment.message,
            )
            self._event_sink.purchase_failed(attempt, transaction)
            raise PaymentFailedError(
                message=f"{self._config.payment_processor_label}: {payment.message}",
                transaction=transaction,
            )

        return self.invoice_for(attempt, transaction)

    def latest_successful_transaction(self, attempt: PurchaseAttempt) -> Transaction:
        """Last successful transaction of the package purchase, or an empty one."""

        purchase = attempt.package.purchase
        transaction = None
        if purchase is not None and purchase.id is not None:
            transaction = self._repository.latest_successful_transaction(str(purchase.id))
        return transaction if transaction is not None else Transaction()

    def _base_transaction(self, attempt: PurchaseAttempt) -> Transaction:
        pricing = attempt.pricing
        purchase = attempt.package.purchase
        user = attempt.user
        return Transaction(
            name=attempt.package.name,
            purchase_id=as_identifier(purchase.id) if purchase is not None else None,
            subscription_id=as_identifier(attempt.subscription.id) if attempt.subscription is not None else None,
            user_id=as_identifier(user.id) if user is not None else None,
            gateway=user.payment_gateway if user is not None else None,
            price=pricing.price if pricing else attempt.plan.price,
            discount=pricing.discount if pricing else 0,
            summary=0,
            currency=attempt.plan.currency or self._config.default_currency,
            coupons=attempt.discounts,
        )

    def invoice_for(self, attempt: PurchaseAttempt, transaction: Transaction) -> Invoice:
        return Invoice.from_attempt(
            attempt,
            transaction,
            currency=resolve_currency(transaction, self._config.default_currency),
            payment_method=parse_payment_method(transaction.payload(), self._parsers),
        )
