"""Transaction records and their persistence."""

from .models import Transaction, TransactionStatus, as_identifier, resolve_currency
from .repository import PostgresTransactionRepository

__all__ = [
    "PostgresTransactionRepository",
    "Transaction",
    "TransactionStatus",
    "as_identifier",
    "resolve_currency",
]
