"""Application wiring for the purchase orchestrator."""
from __future__ import annotations

import logging
from decimal import Decimal
from functools import lru_cache
from typing import Any, Optional
from uuid import uuid4

from dotenv import load_dotenv

from ...config import PurchaseConfig, load_purchase_config
from ..payments import PaymentProcessor, PaymentResult, SandboxTransactionPayload
from ..purchases import (
    Host,
    Invoice,
    Plan,
    PurchaseAttempt,
    PurchaseEventSink,
    PurchaseLocks,
    PurchaseOrchestrator,
    PurchaseUser,
    TransactionRecorder,
    TransactionRepository,
)
from ..transactions import PostgresTransactionRepository, Transaction


logger = logging.getLogger("purchasing")


class LoggingPurchaseEventSink(PurchaseEventSink):
    """Event sink that records failed purchases to the application logger."""

    def purchase_failed(self, attempt: PurchaseAttempt, transaction: Transaction) -> None:
        logger.warning(
            "Purchase failed package=%s user=%s transaction=%s amount=%s %s message=%s",
            attempt.package.name,
            transaction.user_id,
            transaction.id,
            transaction.summary,
            transaction.currency,
            transaction.message,
        )


class LocalSandboxPaymentProcessor(PaymentProcessor):
    """Minimal processor implementation for local development and tests."""

    def __init__(self, *, decline_above: Optional[Decimal] = None) -> None:
        self._decline_above = decline_above

    def charge(self, amount: Decimal, descriptor: str, *, user: Any) -> PaymentResult:
        reference = f"sbx_{uuid4().hex}"
        approved = self._decline_above is None or amount <= self._decline_above
        logger.debug("Sandbox charge %s for %s approved=%s", amount, descriptor, approved)
        return PaymentResult(
            successful=approved,
            amount=amount if approved else Decimal("0"),
            message="Approved" if approved else "Declined by sandbox",
            transaction_reference=reference,
            data=SandboxTransactionPayload(reference=reference, approved=approved),
        )


class PurchaseService:
    """Application entry point for purchases and plan previews."""

    def __init__(self, orchestrator: PurchaseOrchestrator) -> None:
        self.orchestrator = orchestrator

    def purchase(
        self,
        plan: Plan,
        host: Host,
        user: Optional[PurchaseUser],
        *,
        request_coupon_code: Optional[str] = None,
        renew: bool = False,
    ) -> Optional[Invoice]:
        return self.orchestrator.purchase(
            plan,
            host,
            user,
            request_coupon_code=request_coupon_code,
            renew=renew,
        )

    def preview(
        self,
        plan: Plan,
        host: Host,
        user: Optional[PurchaseUser],
        *,
        request_coupon_code: Optional[str] = None,
    ) -> Plan:
        return self.orchestrator.preview(plan, host, user, request_coupon_code=request_coupon_code)


def build_purchase_service(
    *,
    repository: TransactionRepository,
    processor: PaymentProcessor,
    event_sink: Optional[PurchaseEventSink] = None,
    config: Optional[PurchaseConfig] = None,
    locks: Optional[PurchaseLocks] = None,
) -> PurchaseService:
    resolved_config = config or PurchaseConfig()
    recorder = TransactionRecorder(
        repository,
        event_sink or LoggingPurchaseEventSink(),
        config=resolved_config,
    )
    return PurchaseService(PurchaseOrchestrator(processor, recorder, locks=locks))


@lru_cache(maxsize=1)
def get_purchase_service() -> PurchaseService:
    load_dotenv()
    config = load_purchase_config()
    return build_purchase_service(
        repository=PostgresTransactionRepository(),
        processor=LocalSandboxPaymentProcessor(decline_above=config.sandbox_decline_threshold),
        config=config,
    )


__all__ = [
    "LocalSandboxPaymentProcessor",
    "LoggingPurchaseEventSink",
    "PurchaseLocks",
    "PurchaseService",
    "build_purchase_service",
    "get_purchase_service",
]
