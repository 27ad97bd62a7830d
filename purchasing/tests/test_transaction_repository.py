"""Tests for the Postgres transaction repository against a fake connection."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

import psycopg2.extras
import pytest

from purchasing import app_context
from purchasing.app.coupons import Coupon
from purchasing.app.transactions import PostgresTransactionRepository, Transaction, TransactionStatus


CREATED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeCursor:
    def __init__(self, rows: List[Optional[dict]]) -> None:
        self._rows = list(rows)
        self.executed: List[tuple] = []
        self.closed = False

    def execute(self, sql: str, params: Any) -> None:
        self.executed.append((sql, params))

    def fetchone(self) -> Optional[dict]:
        return self._rows.pop(0) if self._rows else None

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, rows: List[Optional[dict]]) -> None:
        self.cursor_obj = FakeCursor(rows)
        self.cursor_factory = None
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, cursor_factory=None) -> FakeCursor:
        self.cursor_factory = cursor_factory
        return self.cursor_obj

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        self.closed = True


def _row(**overrides: Any) -> dict:
    row = {
        "id": 17,
        "name": "Backups",
        "purchase_id": 42,
        "subscription_id": None,
        "user_id": 7,
        "gateway": "braintree",
        "price": Decimal("12.00"),
        "discount": Decimal("2.00"),
        "summary": Decimal("10.00"),
        "currency": "USD",
        "coupons": [{"code": "AUTO", "redeem": "autoredeem", "amount": "2"}],
        "data": '{"family": "sandbox", "reference": "sbx_1"}',
        "reference": "sbx_1",
        "message": "Approved",
        "status": 1,
        "created_at": CREATED_AT,
    }
    row.update(overrides)
    return row


def test_save_transaction_inserts_and_maps_row() -> None:
    connection = FakeConnection([_row()])
    repository = PostgresTransactionRepository(conn=connection)
    coupon = Coupon(code="AUTO", redeem="autoredeem", amount=Decimal("2"))

    stored = repository.save_transaction(
        Transaction(name="Backups", purchase_id="42", status=TransactionStatus.SUCCESS, coupons=(coupon,))
    )

    sql, params = connection.cursor_obj.executed[0]
    assert "INSERT INTO purchase_transactions" in sql
    assert params["status"] == 1
    assert isinstance(params["coupons"], psycopg2.extras.Json)
    assert params["coupons"].adapted[0]["code"] == "AUTO"
    assert connection.cursor_factory is psycopg2.extras.RealDictCursor
    assert connection.commits == 0
    assert connection.cursor_obj.closed

    assert stored.id == 17
    assert stored.purchase_id == "42"
    assert stored.user_id == "7"
    assert stored.subscription_id is None
    assert stored.status == TransactionStatus.SUCCESS
    assert stored.coupons[0].code == "AUTO"
    assert stored.payload().reference == "sbx_1"


def test_save_transaction_refuses_persisted_records() -> None:
    connection = FakeConnection([])
    repository = PostgresTransactionRepository(conn=connection)

    with pytest.raises(ValueError, match="append-only"):
        repository.save_transaction(Transaction(id=3))

    assert connection.cursor_obj.executed == []


def test_latest_successful_transaction_uses_context_connection() -> None:
    connection = FakeConnection([_row(id=21, reference="sbx_9")])
    app_context.configure(get_conn=lambda: connection)

    transaction = PostgresTransactionRepository().latest_successful_transaction("42")

    sql, params = connection.cursor_obj.executed[0]
    assert "ORDER BY id DESC" in sql
    assert params == ("42", 1)
    assert transaction.id == 21
    assert transaction.reference == "sbx_9"
    assert connection.commits == 1
    assert connection.closed


def test_latest_successful_transaction_returns_none_without_rows() -> None:
    repository = PostgresTransactionRepository(conn=FakeConnection([]))

    assert repository.latest_successful_transaction("42") is None


def test_failed_insert_rolls_back_context_connection() -> None:
    connection = FakeConnection([None])
    app_context.configure(get_conn=lambda: connection)

    with pytest.raises(RuntimeError, match="Failed to persist transaction"):
        PostgresTransactionRepository().save_transaction(Transaction(name="Backups"))

    assert connection.rollbacks == 1
    assert connection.commits == 0
    assert connection.closed
