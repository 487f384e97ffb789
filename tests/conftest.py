# ruff: noqa

"""Pytest configuration and an in-memory stand-in for the Supabase client."""

import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from backoffice.config.permissions_config import GOVERNED_TABLES, ROLES
from backoffice.database.supabase_client import get_service_supabase, get_supabase
from backoffice.main import app
from backoffice.modules.auth.service import clear_auth_cache

# Column the store fills with now() on insert
TIMESTAMP_COLUMN = {
    "audit_log": "timestamp",
    "webhook_delivery_logs": "dispatched_at",
}


def _as_comparable(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.columns: Optional[List[str]] = None
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.ignore_duplicates = False
        self.filters: List = []
        self.ordering: List = []
        self._limit: Optional[int] = None
        self._offset = 0

    # builders
    def select(self, columns: str = "*"):
        self.operation = "select"
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",") if c.strip()]
        return self

    def insert(self, data):
        self.operation = "insert"
        self.payload = data
        return self

    def upsert(self, data, on_conflict: str = "id", ignore_duplicates: bool = False):
        self.operation = "upsert"
        self.payload = data
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def update(self, data):
        self.operation = "update"
        self.payload = data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: _as_comparable(row.get(column)) >= _as_comparable(value))
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: _as_comparable(row.get(column)) <= _as_comparable(value))
        return self

    def order(self, column, desc: bool = False):
        self.ordering.append((column, desc))
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def offset(self, n: int):
        self._offset = n
        return self

    # execution
    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(f(row) for f in self.filters)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns is None:
            return copy.deepcopy(row)
        return {c: copy.deepcopy(row.get(c)) for c in self.columns}

    def execute(self):
        self.db.calls.append((self.table_name, self.operation))
        if (self.table_name, self.operation) in self.db.failures:
            raise Exception(f"simulated failure on {self.operation} {self.table_name}")
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.operation == "select":
            selected = [r for r in rows if self._matches(r)]
            for column, desc in reversed(self.ordering):
                selected.sort(
                    key=lambda r: (r.get(column) is None, _as_comparable(r.get(column))),
                    reverse=desc,
                )
            selected = selected[self._offset:]
            if self._limit is not None:
                selected = selected[:self._limit]
            return SimpleNamespace(data=[self._project(r) for r in selected])

        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            return SimpleNamespace(data=[copy.deepcopy(self.db._insert(self.table_name, item)) for item in items])

        if self.operation == "upsert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = [k.strip() for k in self.on_conflict.split(",")]
            out = []
            for item in items:
                existing = next(
                    (r for r in rows if all(r.get(k) == item.get(k) for k in keys)), None
                )
                if existing is not None and self.ignore_duplicates:
                    continue
                if existing is not None:
                    existing.update(copy.deepcopy(item))
                    out.append(copy.deepcopy(existing))
                else:
                    out.append(copy.deepcopy(self.db._insert(self.table_name, item)))
            return SimpleNamespace(data=out)

        if self.operation == "update":
            out = []
            for r in rows:
                if self._matches(r):
                    r.update(copy.deepcopy(self.payload))
                    out.append(copy.deepcopy(r))
            return SimpleNamespace(data=out)

        if self.operation == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=removed)

        raise AssertionError(f"unsupported operation {self.operation}")


class FakeAuth:
    def __init__(self):
        self.users: Dict[str, SimpleNamespace] = {}

    def add_user(self, token: str, user_id: str, email: str = "", app_metadata=None):
        self.users[token] = SimpleNamespace(
            id=user_id,
            email=email or f"{user_id}@example.com",
            user_metadata={},
            app_metadata=app_metadata or {},
        )

    def get_user(self, jwt: str):
        if jwt not in self.users:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=self.users[jwt])


class FakeSupabase:
    """Just enough of supabase.Client for the services: table() query builder and auth.get_user()."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failures = set()
        self.calls: List = []
        # tables whose store assigns no id column
        self.keyless = set()
        self.auth = FakeAuth()
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def _insert(self, table: str, item: Dict[str, Any]) -> Dict[str, Any]:
        row = copy.deepcopy(item)
        if table not in self.keyless:
            row.setdefault("id", str(uuid.uuid4()))
        row.setdefault(TIMESTAMP_COLUMN.get(table, "created_at"), self.tick())
        self.tables.setdefault(table, []).append(row)
        return row

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail(self, table: str, operation: str):
        self.failures.add((table, operation))

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])


def seed_registry(db: FakeSupabase) -> None:
    for level in ROLES:
        db._insert("permissoes", {"level": level})
    for name, meta in GOVERNED_TABLES.items():
        db._insert("permission_tables", {"table_name": name, **meta})


def _grant(db: FakeSupabase, role: str, table_name: str, *ops: str) -> None:
    db._insert("role_table_permissions", {
        "role": role,
        "table_name": table_name,
        **{f"can_{op}": op in ops for op in ("create", "read", "update", "delete")},
    })


@pytest.fixture
def empty_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def grant():
    return _grant


@pytest.fixture
def db() -> FakeSupabase:
    fake = FakeSupabase()
    seed_registry(fake)
    return fake


@pytest.fixture
def client(db: FakeSupabase):
    clear_auth_cache()
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def admin_headers(db: FakeSupabase) -> Dict[str, str]:
    """An 'admin' role user with full rights on every governed table."""
    db.auth.add_user("admin-token", "admin-1")
    db._insert("user_roles", {"user_id": "admin-1", "role": "admin"})
    for name in GOVERNED_TABLES:
        _grant(db, "admin", name, "create", "read", "update", "delete")
    db._insert("profiles", {"user_id": "admin-1", "full_name": "Ana Admin"})
    return {"Authorization": "Bearer admin-token"}


@pytest.fixture
def operador_headers(db: FakeSupabase) -> Dict[str, str]:
    """An 'operador' user that can only read senhas."""
    db.auth.add_user("op-token", "op-1")
    db._insert("user_roles", {"user_id": "op-1", "role": "operador"})
    _grant(db, "operador", "senhas", "read")
    db._insert("profiles", {"user_id": "op-1", "full_name": "Otavio Operador"})
    return {"Authorization": "Bearer op-token"}
