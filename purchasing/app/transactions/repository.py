"""Persistence layer for purchase transactions."""
from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional

import psycopg2
import psycopg2.extras
from psycopg2.extensions import connection as PgConnection
from psycopg2.extensions import cursor as PgCursor

from ...app_context import get_conn
from ..coupons.models import Coupon
from .models import Transaction, TransactionStatus, as_identifier


def _row_to_transaction(row: dict) -> Transaction:
    return Transaction(
        id=int(row["id"]),
        name=row.get("name"),
        purchase_id=as_identifier(row.get("purchase_id")),
        subscription_id=as_identifier(row.get("subscription_id")),
        user_id=as_identifier(row.get("user_id")),
        gateway=row.get("gateway"),
        price=Decimal(row.get("price") or 0),
        discount=Decimal(row.get("discount") or 0),
        summary=Decimal(row.get("summary") or 0),
        currency=row.get("currency"),
        coupons=tuple(Coupon.model_validate(item) for item in row.get("coupons") or ()),
        data=row.get("data"),
        reference=row.get("reference"),
        message=row.get("message"),
        status=TransactionStatus(int(row["status"])),
        created_at=row["created_at"],
    )


class PostgresTransactionRepository:
    """Append-only transaction store backed by PostgreSQL."""

    def __init__(self, *, conn: Optional[PgConnection] = None) -> None:
        self._conn = conn

    @contextmanager
    def _cursor(self) -> Iterator[PgCursor]:
        """Cursor on the injected connection, or on a context connection committed and closed here."""

        owned = self._conn is None
        connection = get_conn() if owned else self._conn
        cursor = connection.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
        try:
            yield cursor
            if owned:
                connection.commit()
        except Exception:
            if owned:
                connection.rollback()
            raise
        finally:
            cursor.close()
            if owned:
                connection.close()

    def save_transaction(self, transaction: Transaction) -> Transaction:
        """Insert a transaction record; existing rows are never updated."""

        if transaction.id is not None:
            raise ValueError("Transactions are append-only; refusing to rewrite a persisted record")

        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO purchase_transactions (
                    name,
                    purchase_id,
                    subscription_id,
                    user_id,
                    gateway,
                    price,
                    discount,
                    summary,
                    currency,
                    coupons,
                    data,
                    reference,
                    message,
                    status,
                    created_at
                )
                VALUES (%(name)s, %(purchase_id)s, %(subscription_id)s, %(user_id)s,
                        %(gateway)s, %(price)s, %(discount)s, %(summary)s, %(currency)s,
                        %(coupons)s, %(data)s, %(reference)s, %(message)s, %(status)s,
                        %(created_at)s)
                RETURNING *
                """,
                {
                    "name": transaction.name,
                    "purchase_id": transaction.purchase_id,
                    "subscription_id": transaction.subscription_id,
                    "user_id": transaction.user_id,
                    "gateway": transaction.gateway,
                    "price": transaction.price,
                    "discount": transaction.discount,
                    "summary": transaction.summary,
                    "currency": transaction.currency,
                    "coupons": psycopg2.extras.Json(
                        [coupon.model_dump(mode="json") for coupon in transaction.coupons]
                    ),
                    "data": transaction.data,
                    "reference": transaction.reference,
                    "message": transaction.message,
                    "status": int(transaction.status),
                    "created_at": transaction.created_at,
                },
            )
            row = cursor.fetchone()
            if not row:
                raise RuntimeError("Failed to persist transaction")
            return _row_to_transaction(row)

    def latest_successful_transaction(self, purchase_id: str) -> Optional[Transaction]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT *
                FROM purchase_transactions
                WHERE purchase_id = %s AND status = %s
                ORDER BY id DESC
                LIMIT 1
                """,
                (purchase_id, int(TransactionStatus.SUCCESS)),
            )
            row = cursor.fetchone()
            return _row_to_transaction(row) if row else None
