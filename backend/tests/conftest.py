"""
Pytest fixtures for the ordering API.
"""

import os
import threading

os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "header.payload.signature")
os.environ.setdefault("ADMIN_EMAILS", "gerente@example.com; Chefe@Example.com")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any, Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from auth import AuthUser, get_current_user, get_optional_user  # noqa: E402
from main import app  # noqa: E402
from repositories import orders_repository  # noqa: E402
from schemas import OrderForm  # noqa: E402


class FakeOrderStore:
    """In-memory stand-in for the orders table."""

    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []
        self.inserts: List[Dict[str, Any]] = []
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def insert_order(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.inserts.append(dict(record))
        self._clock += timedelta(minutes=1)
        row = dict(record)
        row["id"] = f"order-{len(self.rows) + 1}"
        row["created_at"] = self._clock.isoformat()
        self.rows.append(row)
        return dict(row)

    def fetch_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        for row in self.rows:
            if row["id"] == order_id:
                return dict(row)
        return None

    def _newest_first(self) -> List[Dict[str, Any]]:
        return sorted(self.rows, key=lambda row: row["created_at"], reverse=True)

    def fetch_orders_by_creator(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        rows = [row for row in self._newest_first() if row.get("created_by") == user_id]
        return [dict(row) for row in rows[:limit]]

    def fetch_orders(self, status: Optional[str], limit: int) -> List[Dict[str, Any]]:
        rows = self._newest_first()
        if status:
            rows = [row for row in rows if row.get("status") == status]
        return [dict(row) for row in rows[:limit]]

    def update_order(
        self, order_id: str, updates: Dict[str, Any], expected_status: str
    ) -> Optional[Dict[str, Any]]:
        with self._lock:
            for row in self.rows:
                if row["id"] == order_id and row.get("status") == expected_status:
                    row.update(updates)
                    return dict(row)
        return None


@pytest.fixture
def store(monkeypatch):
    fake = FakeOrderStore()
    for name in (
        "insert_order",
        "fetch_order",
        "fetch_orders_by_creator",
        "fetch_orders",
        "update_order",
    ):
        monkeypatch.setattr(orders_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def customer():
    return AuthUser(id="user-1", email="cliente@example.com")


@pytest.fixture
def other_customer():
    return AuthUser(id="user-2", email="outro@example.com")


@pytest.fixture
def admin_user():
    return AuthUser(id="admin-1", email="gerente@example.com")


@pytest.fixture
def valid_form():
    """A complete PagSeguro order for three Smart machines."""
    return OrderForm(
        customer_name="  Maria Silva ",
        customer_phone="(11) 98888-7777",
        customer_email="maria@example.com",
        pagseguro_email="maria.pagseguro@example.com",
        delivery_cep="01001-000",
        delivery_street="Praça da Sé",
        delivery_number="100",
        delivery_complement="Sala 2",
        delivery_neighborhood="Sé",
        delivery_city="São Paulo",
        delivery_state="sp",
        machine_type="pagseguro",
        selected_machine="Smart",
        quantity=3,
        payment_method="avista",
    )


@pytest.fixture
def login():
    def _login(user: Optional[AuthUser]) -> None:
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
            app.dependency_overrides[get_optional_user] = lambda: None
            return
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_user] = lambda: user

    yield _login
    app.dependency_overrides.clear()


@pytest.fixture
def client(store):
    return TestClient(app)
