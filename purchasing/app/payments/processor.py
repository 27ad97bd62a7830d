"""Payment processor contract used by the purchase orchestrator."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol

from .models import PaymentResult


class PaymentProcessor(Protocol):
    """External payment processor charging a user."""

    def charge(self, amount: Decimal, descriptor: str, *, user: Any) -> PaymentResult:
        """Capture ``amount`` from ``user`` and report the outcome."""


class PaymentProcessorError(Exception):
    """Raised by processors when a charge cannot be attempted or completed."""
