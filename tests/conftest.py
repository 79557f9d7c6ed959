"""
Shared test fixtures.

The Supabase client is replaced by an in-memory fake; services are
built fresh per test so they pick up the patched client.
"""

import os
import sys
from pathlib import Path

# Required settings must exist before config is imported
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon.key-signature")

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator

from models.product import CatalogProduct, Unit


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        if count is not None:
            self.count = count
        elif isinstance(self.data, list):
            self.count = len(self.data)
        else:
            self.count = 1


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, client, table_name: str, data: list = None, count: int = None):
        self._client = client
        self._table = table_name
        self._data = data or []
        self._count = count
        self._is_single = False

    def _record(self, method: str, *args, **kwargs):
        self._client.calls.append((self._table, method, args, kwargs))

    def select(self, *args, **kwargs):
        self._record("select", *args, **kwargs)
        return self

    def insert(self, data):
        self._record("insert", data)
        # Simulate insert - add id and timestamps
        rows = [data] if isinstance(data, dict) else data
        inserted = []
        for item in rows:
            row = dict(item)
            row.setdefault("id", "test-uuid-123")
            row.setdefault("created_at", datetime.utcnow().isoformat() + "Z")
            inserted.append(row)
        self._data = inserted
        return self

    def update(self, data):
        self._record("update", data)
        # Simulate update - merge with existing data
        updated = [{**item, **data} for item in self._data]
        self._data = updated if updated else [data]
        return self

    def delete(self):
        self._record("delete")
        return self

    def eq(self, column, value):
        self._record("eq", column, value)
        return self

    def neq(self, column, value):
        self._record("neq", column, value)
        return self

    def in_(self, column, values):
        self._record("in_", column, values)
        return self

    def gte(self, column, value):
        self._record("gte", column, value)
        return self

    def lte(self, column, value):
        self._record("lte", column, value)
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        self._record("order", column, **kwargs)
        return self

    def limit(self, count):
        self._record("limit", count)
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._table in self._client.failing_tables:
            raise Exception(f"connection lost on {self._table}")
        if self._is_single:
            # Return first item or empty for single()
            data = self._data[0] if self._data else None
            return MockSupabaseResponse(data=data, count=1 if data else 0)
        return MockSupabaseResponse(data=self._data, count=self._count)


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, client, name: str, data: list = None, count: int = None):
        self._client = client
        self._name = name
        self._data = data or []
        self._count = count

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self._client, self._name, [dict(r) for r in self._data], self._count)

    def select(self, *args, **kwargs):
        return self._query().select(*args, **kwargs)

    def insert(self, data):
        return self._query().insert(data)

    def update(self, data):
        return self._query().update(data)

    def delete(self):
        return self._query().delete()


class MockRpcCall:
    def __init__(self, client, name: str, params: dict):
        self._client = client
        self._name = name
        self._params = params

    def execute(self) -> MockSupabaseResponse:
        if self._name in self._client.failing_rpcs:
            raise Exception(f"rpc {self._name} failed")
        return MockSupabaseResponse(data=self._client.rpc_results.get(self._name))


class MockSupabaseClient:
    """Mock Supabase client that records every call."""

    def __init__(self):
        self._tables = {}
        self.calls = []
        self.rpc_calls = []
        self.rpc_results = {}
        self.failing_tables = set()
        self.failing_rpcs = set()

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def set_rpc_result(self, name: str, data):
        self.rpc_results[name] = data

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(self, name, config["data"], config["count"])

    def rpc(self, name: str, params: dict) -> MockRpcCall:
        self.rpc_calls.append((name, params))
        return MockRpcCall(self, name, params)

    def calls_for(self, table_name: str, method: str) -> list:
        """Arguments of every recorded call of method on table."""
        return [
            (args, kwargs) for table, m, args, kwargs in self.calls
            if table == table_name and m == method
        ]


# ===================
# FIXTURES
# ===================

SERVICE_MODULES = [
    "config.database",
    "services.product_service",
    "services.price_service",
    "services.checkout_service",
    "services.purchase_order_service",
    "services.report_service",
]


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": "1", "name": "Appel", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock in every service module.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any service built afterwards gets the mock
    """
    patchers = [
        patch(f"{module}.get_supabase_client", return_value=mock_supabase)
        for module in SERVICE_MODULES
    ]
    for p in patchers:
        p.start()
    try:
        yield mock_supabase
    finally:
        for p in reversed(patchers):
            p.stop()


@pytest.fixture
def catalog() -> list[CatalogProduct]:
    """Small greengrocer catalog."""
    return [
        CatalogProduct(id="p-appel", name="Appel", unit=Unit.PIECE),
        CatalogProduct(id="p-bananen", name="Bio Bananen", unit=Unit.PIECE),
        CatalogProduct(id="p-tomaat", name="Tomaten Tros", unit=Unit.WEIGHT_KG),
        CatalogProduct(id="p-paprika", name="Rode Paprika", unit=Unit.PIECE),
        CatalogProduct(id="p-prei", name="Prei", unit=Unit.PIECE),
    ]


@pytest.fixture
def sample_product_data() -> dict:
    """Sample products row."""
    return {
        "id": "p-appel",
        "name": "Appel",
        "unit": "STUK",
        "is_active": True,
        "stock_quantity": 12,
    }


@pytest.fixture
def sample_products_list() -> list:
    """Sample products rows ordered by name."""
    return [
        {"id": "p-appel", "name": "Appel", "unit": "STUK", "is_active": True, "stock_quantity": 40},
        {"id": "p-bananen", "name": "Bio Bananen", "unit": "STUK", "is_active": True, "stock_quantity": 3},
        {"id": "p-prei", "name": "Prei", "unit": "STUK", "is_active": True, "stock_quantity": None},
        {"id": "p-tomaat", "name": "Tomaten Tros", "unit": "KILO", "is_active": True, "stock_quantity": 8.5},
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Services are patched per test at the route module level.
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
