"""
Shared test fixtures.

Provides a mock Supabase client with a chainable query builder, a recording
lead sink for import tests, and FastAPI test clients.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

# Settings are loaded at import time; give them something to load
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from contextlib import ExitStack
from unittest.mock import patch
from datetime import datetime, timezone
from typing import Generator

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock query builder with chainable methods.

    eq(), gte() and lte() filters really apply; other filters are accepted
    and ignored. Selected column lists are recorded on the table.
    """

    def __init__(self, table: "MockSupabaseTable", count: int = None):
        self._table = table
        self._count = count
        self._filters: list[tuple[str, object]] = []
        self._ranges: list[tuple[str, str, object]] = []
        self._action = "select"
        self._payload = None

    # Actions

    def select(self, *args, **kwargs):
        self._action = "select"
        self._table.select_calls.append(args[0] if args else "*")
        return self

    def insert(self, data):
        self._action = "insert"
        self._payload = [data] if isinstance(data, dict) else list(data)
        return self

    def update(self, data):
        self._action = "update"
        self._payload = data
        return self

    def delete(self):
        self._action = "delete"
        return self

    # Filters and modifiers

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def neq(self, column, value):
        return self

    def gte(self, column, value):
        self._ranges.append((column, ">=", value))
        return self

    def lte(self, column, value):
        self._ranges.append((column, "<=", value))
        return self

    def in_(self, column, values):
        return self

    def or_(self, filters):
        self._table.or_filters.append(filters)
        return self

    def order(self, column, **kwargs):
        return self

    def range(self, start, end):
        return self

    def limit(self, count):
        return self

    def single(self):
        return self

    def _matches(self, row: dict) -> bool:
        if not all(str(row.get(col)) == str(val) for col, val in self._filters):
            return False
        for col, op, val in self._ranges:
            # ISO dates compare correctly as strings
            cell = str(row.get(col))
            if (op == ">=" and cell < str(val)) or (op == "<=" and cell > str(val)):
                return False
        return True

    def execute(self) -> MockSupabaseResponse:
        table = self._table

        if self._action == "insert":
            table.insert_calls.append([dict(r) for r in self._payload])
            if table.fail_on_insert_call and len(table.insert_calls) in table.fail_on_insert_call:
                raise table.insert_error
            created = []
            for item in self._payload:
                row = {
                    "id": table.next_id(),
                    "created_at": datetime.now(timezone.utc).isoformat(),
                    **item,
                }
                table.rows.append(row)
                created.append(row)
            return MockSupabaseResponse(data=created)

        matched = [row for row in table.rows if self._matches(row)]

        if self._action == "update":
            updated = []
            for row in matched:
                row.update(self._payload)
                row["updated_at"] = datetime.now(timezone.utc).isoformat()
                updated.append(dict(row))
            return MockSupabaseResponse(data=updated)

        if self._action == "delete":
            table.rows = [row for row in table.rows if not self._matches(row)]
            return MockSupabaseResponse(data=matched)

        return MockSupabaseResponse(
            data=[dict(row) for row in matched],
            count=self._count if self._count is not None else len(matched)
        )


class MockSupabaseTable:
    """Mock Supabase table backed by a list of dicts."""

    def __init__(self, data: list = None, count: int = None):
        self.rows = [dict(r) for r in (data or [])]
        self.count = count
        self.insert_calls: list[list[dict]] = []
        self.or_filters: list[str] = []
        self.select_calls: list[str] = []
        self.fail_on_insert_call: set[int] = set()
        self.insert_error: Exception = Exception("insert failed")

    def next_id(self) -> int:
        ids = [r["id"] for r in self.rows if isinstance(r.get("id"), int)]
        return max(ids, default=0) + 1

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self, self.count).select(*args, **kwargs)

    def insert(self, data):
        return MockSupabaseQuery(self).insert(data)

    def update(self, data):
        return MockSupabaseQuery(self).update(data)

    def delete(self):
        return MockSupabaseQuery(self).delete()


class MockSupabaseClient:
    """Mock Supabase client; tables persist across calls."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = MockSupabaseTable(data, count)

    def fail_inserts(self, table_name: str, calls: set[int], error: Exception):
        """Make the given 1-based insert calls on a table raise error."""
        table = self.table(table_name)
        table.fail_on_insert_call = set(calls)
        table.insert_error = error

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


class MockAPIError(Exception):
    """Stand-in for postgrest APIError: message/details/hint attributes."""

    def __init__(self, message=None, details=None, hint=None, code=None):
        self.message = message
        self.details = details
        self.hint = hint
        self.code = code
        super().__init__({"message": message, "details": details, "hint": hint, "code": code})


class RecordingSink:
    """Lead sink that records every batch and can fail chosen batches."""

    def __init__(self, fail_on: set[int] = None, error: Exception = None):
        self.calls: list[list[dict]] = []
        self.fail_on = fail_on or set()
        self.error = error or MockAPIError(message="insert rejected")

    def insert_many(self, records):
        self.calls.append(list(records))
        if len(self.calls) in self.fail_on:
            raise self.error

    @property
    def batch_sizes(self) -> list[int]:
        return [len(c) for c in self.calls]


# ===================
# FIXTURES
# ===================

SERVICE_MODULES = (
    "services.lead_service",
    "services.job_service",
    "services.report_service",
    "services.lead_import_service",
    "config.database",
)


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("leads", [
                {"id": 1, "name": "Maria", ...}
            ])
    """
    return MockSupabaseClient()


def _reset_singletons():
    import services.lead_service as lead_service
    import services.job_service as job_service
    import services.report_service as report_service
    import services.lead_import_service as lead_import_service

    lead_service._lead_service = None
    job_service._job_service = None
    report_service._report_service = None
    lead_import_service._lead_import_service = None


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("leads", [...])
            # Now any service using get_supabase_client() gets the mock
    """
    _reset_singletons()
    with ExitStack() as stack:
        for module in SERVICE_MODULES:
            stack.enter_context(
                patch(f"{module}.get_supabase_client", return_value=mock_supabase)
            )
        stack.enter_context(
            patch("services.lead_import_service.get_admin_client", return_value=None)
        )
        yield mock_supabase
    _reset_singletons()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    delays: list[float] = []
    return delays.append, delays


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("leads", [...])
            response = test_client_with_mock_db.get("/api/leads")
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
