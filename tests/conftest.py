"""
Shared test fixtures.

Provides an in-memory Supabase double, a fake catalog client and ready-made
import services wired to both.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings are loaded at import time; provide the required values first
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "development")

import copy
from collections import Counter
from typing import Any, Optional

import pytest

from exceptions import CatalogNotFoundError, CatalogRemoteError


# ===================
# IN-MEMORY SUPABASE
# ===================

class InMemoryResponse:
    """Mirror of a postgrest APIResponse."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count


class InMemoryQuery:
    """
    Chainable query builder over InMemorySupabase tables.

    Supports the subset the import services use: select/insert/update/delete,
    eq, in_, not_.in_ and limit.
    """

    def __init__(
        self,
        client: "InMemorySupabase",
        table: str,
        operation: str,
        payload: Any = None,
        columns: str = "*",
        count: Optional[str] = None
    ):
        self._client = client
        self._table = table
        self._operation = operation
        self._payload = payload
        self._columns = columns
        self._count = count
        self._filters: list = []
        self._negate_next = False
        self._limit: Optional[int] = None

    @property
    def not_(self):
        self._negate_next = True
        return self

    def _add_filter(self, kind: str, column: str, value: Any):
        self._filters.append((kind, column, value, self._negate_next))
        self._negate_next = False
        return self

    def eq(self, column: str, value: Any):
        return self._add_filter("eq", column, value)

    def in_(self, column: str, values: list):
        return self._add_filter("in", column, list(values))

    def limit(self, count: int):
        self._limit = count
        return self

    def _matches(self, row: dict) -> bool:
        for kind, column, value, negate in self._filters:
            if kind == "eq":
                hit = row.get(column) == value
            else:
                hit = row.get(column) in value
            if hit == negate:
                return False
        return True

    def _project(self, row: dict) -> dict:
        if self._columns == "*":
            return dict(row)
        columns = [c.strip() for c in self._columns.split(",")]
        return {c: row.get(c) for c in columns}

    def execute(self) -> InMemoryResponse:
        self._client.record(self._table, self._operation, self)
        rows = self._client.tables.setdefault(self._table, [])

        if self._operation == "select":
            matched = [self._project(r) for r in rows if self._matches(r)]
            total = len(matched)
            if self._limit is not None:
                matched = matched[:self._limit]
            return InMemoryResponse(matched, total if self._count else None)

        if self._operation == "insert":
            new_rows = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = [copy.deepcopy(r) for r in new_rows]
            rows.extend(inserted)
            return InMemoryResponse([dict(r) for r in inserted])

        if self._operation == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self._payload))
                    updated.append(dict(row))
            return InMemoryResponse(updated)

        if self._operation == "delete":
            removed = [r for r in rows if self._matches(r)]
            self._client.tables[self._table] = [r for r in rows if not self._matches(r)]
            return InMemoryResponse([dict(r) for r in removed])

        raise AssertionError(f"unknown operation {self._operation}")


class InMemoryTable:
    def __init__(self, client: "InMemorySupabase", name: str):
        self._client = client
        self._name = name

    def select(self, columns: str = "*", count: Optional[str] = None):
        return InMemoryQuery(self._client, self._name, "select", columns=columns, count=count)

    def insert(self, data):
        return InMemoryQuery(self._client, self._name, "insert", payload=data)

    def update(self, data: dict):
        return InMemoryQuery(self._client, self._name, "update", payload=data)

    def delete(self):
        return InMemoryQuery(self._client, self._name, "delete")


class InMemorySupabase:
    """
    Supabase client double backed by plain lists.

    Every executed query is appended to ops as (table, operation).
    fail(table, operation) makes matching queries raise on execute.
    """

    WRITE_OPERATIONS = ("insert", "update", "delete")

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.ops: list[tuple[str, str]] = []
        self.queries: list[InMemoryQuery] = []
        self._failures: set[tuple[str, str]] = set()

    def table(self, name: str) -> InMemoryTable:
        return InMemoryTable(self, name)

    def record(self, table: str, operation: str, query: InMemoryQuery) -> None:
        self.ops.append((table, operation))
        self.queries.append(query)
        if (table, operation) in self._failures:
            raise RuntimeError(f"simulated {operation} failure on {table}")

    def seed(self, table: str, rows: list[dict]) -> None:
        self.tables.setdefault(table, []).extend(copy.deepcopy(rows))

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])

    def fail(self, table: str, operation: str) -> None:
        self._failures.add((table, operation))

    def count_ops(self, operation: str, table: Optional[str] = None) -> int:
        return sum(
            1 for t, op in self.ops
            if op == operation and (table is None or t == table)
        )

    @property
    def writes(self) -> list[tuple[str, str]]:
        return [(t, op) for t, op in self.ops if op in self.WRITE_OPERATIONS]

    def reset_ops(self) -> None:
        self.ops.clear()
        self.queries.clear()


# ===================
# FAKE CATALOG CLIENT
# ===================

class FakeCatalogClient:
    """
    In-memory stand-in for CatalogClient.

    Single entities (product, brand, category) raise CatalogNotFoundError when
    absent. Collections default to empty. fail_with(method, key, status)
    makes one call raise like the real client: 404 -> not found, anything
    else -> CatalogRemoteError.
    """

    def __init__(self):
        self.products: dict[str, dict] = {}
        self.brands: dict[int, dict] = {}
        self.categories: dict[int, dict] = {}
        self.skus: dict[int, list] = {}
        self.images: dict[int, list] = {}
        self.stock: dict[int, dict] = {}
        self.specifications: dict[int, list] = {}
        self.calls: Counter = Counter()
        self.call_log: list[tuple[str, Any]] = []
        self._failures: dict[tuple[str, Any], int] = {}

    def fail_with(self, method: str, key: Any, status: int) -> None:
        self._failures[(method, key)] = status

    def calls_for(self, method: str) -> list:
        return [key for name, key in self.call_log if name == method]

    def _call(self, method: str, resource: str, key: Any):
        self.calls[method] += 1
        self.call_log.append((method, key))
        status = self._failures.get((method, key))
        if status == 404:
            raise CatalogNotFoundError(resource, key)
        if status is not None:
            raise CatalogRemoteError(resource, key, status=status)

    def get_product_by_ref_id(self, ref_id: str) -> dict:
        self._call("get_product_by_ref_id", "Product", ref_id)
        if ref_id not in self.products:
            raise CatalogNotFoundError("Product", ref_id)
        return copy.deepcopy(self.products[ref_id])

    def get_brand(self, brand_id: int) -> dict:
        self._call("get_brand", "Brand", brand_id)
        if brand_id not in self.brands:
            raise CatalogNotFoundError("Brand", brand_id)
        return copy.deepcopy(self.brands[brand_id])

    def get_category(self, category_id: int) -> dict:
        self._call("get_category", "Category", category_id)
        if category_id not in self.categories:
            raise CatalogNotFoundError("Category", category_id)
        return copy.deepcopy(self.categories[category_id])

    def get_skus_by_product_id(self, product_id: int) -> list:
        self._call("get_skus_by_product_id", "Skus", product_id)
        return copy.deepcopy(self.skus.get(product_id, []))

    def get_images_by_sku_id(self, sku_id: int) -> list:
        self._call("get_images_by_sku_id", "Images", sku_id)
        return copy.deepcopy(self.images.get(sku_id, []))

    def get_stock_by_sku_id(self, sku_id: int) -> dict:
        self._call("get_stock_by_sku_id", "Stock", sku_id)
        return copy.deepcopy(self.stock.get(sku_id, {"skuId": str(sku_id), "balance": []}))

    def get_product_specifications(self, product_id: int) -> list:
        self._call("get_product_specifications", "Attributes", product_id)
        return copy.deepcopy(self.specifications.get(product_id, []))


# ===================
# FIXTURES
# ===================

@pytest.fixture
def store() -> InMemorySupabase:
    """
    Empty in-memory store.

    Usage:
        def test_something(store):
            store.seed("products", [{"id": 1, "ref_id": "REF"}])
    """
    return InMemorySupabase()


@pytest.fixture
def catalog() -> FakeCatalogClient:
    """Empty fake catalog; see tests/factories.py to populate it."""
    return FakeCatalogClient()


@pytest.fixture
def admission():
    from services.admission_controller import AdmissionController
    return AdmissionController(max_concurrent=10)


@pytest.fixture
def service_kwargs(catalog, store, admission) -> dict:
    """Constructor arguments shared by every import service."""
    from services.retry_policy import RetryPolicy
    return {
        "client": catalog,
        "db": store,
        "admission": admission,
        "retry_policy": RetryPolicy(),
    }


@pytest.fixture
def batch_service(service_kwargs):
    from services.batch_import_service import BatchImportService
    return BatchImportService(**service_kwargs)


@pytest.fixture
def sleeps() -> list:
    """Durations passed to the fast importer's sleep."""
    return []


@pytest.fixture
def fast_service(service_kwargs, sleeps):
    from services.fast_batch_import_service import FastBatchImportService
    return FastBatchImportService(
        **service_kwargs,
        item_pause_seconds=0.005,
        group_pause_seconds=0.05,
        sleep=sleeps.append
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Lifespan is not run, so no database connection is attempted.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/import/admission")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
