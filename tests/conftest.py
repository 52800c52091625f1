"""Pytest fixtures for storefront tests."""

import itertools
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

from storefront.common.db import session as db_session
from storefront.config import StorefrontConfig
from storefront.services import MemoryOrderStore, OrderLedger


class FailingStore(MemoryOrderStore):
    """Reads normally, refuses every write."""

    def set(self, key, blob):
        return False

    def remove(self, key):
        return False


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store():
    return MemoryOrderStore()


@pytest.fixture
def ledger(store):
    """Ledger with sequential ids and a fixed date."""
    counter = itertools.count(1)
    return OrderLedger(
        store,
        id_factory=lambda: f"#{next(counter):09d}",
        date_factory=lambda: "10/19/2026",
    )


@pytest.fixture
def cart():
    return [
        {"id": "p1", "name": "Classic Tee", "price": 19.99, "quantity": 2, "image": "tee.png"},
        {"id": "p2", "name": "Socks", "price": 5.00, "quantity": 1},
    ]


@pytest.fixture
def sqlite_db(temp_dir):
    """Point the shared engine at a fresh sqlite file."""
    db_session.init_engine(f"sqlite:///{temp_dir / 'test.db'}")
    yield db_session
    db_session.engine.dispose()


@pytest.fixture
def config(temp_dir):
    return StorefrontConfig(
        secret_key="test",
        data_dir=temp_dir,
        database_url=f"sqlite:///{temp_dir / 'app.db'}",
        order_store="memory",
        order_key="customer_orders",
        tax_rate=Decimal("0.08"),
        default_shipping=Decimal("15.00"),
        log_level="ERROR",
    )
