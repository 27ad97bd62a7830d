"""Custom exceptions raised by the purchase orchestrator."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status

from ..transactions.models import Transaction


@dataclass
class PurchaseError(Exception):
    """Purchase failure surfaced to callers, optionally tied to its transaction."""

    code: str
    message: str
    status_code: int = status.HTTP_400_BAD_REQUEST
    detail: Optional[Mapping[str, Any]] = None
    transaction: Optional[Transaction] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def payload(self) -> Mapping[str, Any]:
        """JSON body naming the error and, when recorded, its transaction."""

        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.transaction is not None:
            body["transaction_id"] = self.transaction.id
            body["reference"] = self.transaction.reference
        body.update(self.detail or {})
        return body

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=dict(self.payload))


@dataclass
class PaymentFailedError(PurchaseError):
    """The payment processor declined or failed the charge.

    The failed transaction has already been persisted when this is raised.
    """

    code: str = "payment_failed"
    message: str = ""
    status_code: int = status.HTTP_402_PAYMENT_REQUIRED
