"""
Shared fixtures: an in-memory stand-in for the Supabase client and a token -> user map.

FakeSupabase mimics the query-builder calls the services make
(table().select().eq().in_().is_().order().limit().offset().execute(), insert,
update, upsert, delete). It enforces the unique constraints and ON DELETE
CASCADE rules documented in the modules' models.py files, raising
postgrest APIError code 23505 on violations.
"""

import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from underwraps.core.dependencies import get_auth_service
from underwraps.core.errors import Unauthorized
from underwraps.core.rate_limit import limiter
from underwraps.database.supabase_client import get_service_supabase, get_supabase
from underwraps.main import app
from underwraps.modules.users.routes import get_admin_auth_service

UNIQUE_CONSTRAINTS = {
    "profiles": [("email",)],
    "group_members": [("group_id", "user_id")],
    "user_roles": [("user_id", "group_id")],
    "invitations": [("token",)],
    "wishlists": [("user_id", "group_id", "name")],
    "item_claims": [("item_id", "claimer_id")],
}

CASCADES = {
    "profiles": [
        ("group_members", "user_id"), ("user_roles", "user_id"),
        ("wishlists", "user_id"), ("item_claims", "claimer_id"),
    ],
    "groups": [
        ("group_members", "group_id"), ("user_roles", "group_id"), ("wishlists", "group_id"),
        ("item_claims", "group_id"), ("invitations", "group_id"),
    ],
    "wishlists": [("items", "wishlist_id")],
    "items": [("item_claims", "item_id")],
}

DEFAULTS = {
    "items": {"currency": "USD", "quantity": 1, "allow_multiple_claims": False},
    "invitations": {"status": "pending"},
    "wishlists": {"is_default": False},
}


def unique_violation(table: str) -> APIError:
    return APIError({
        "code": "23505",
        "message": f'duplicate key value violates unique constraint on "{table}"',
        "details": "",
        "hint": None,
    })


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.columns: Optional[List[str]] = None
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.order_by: List[tuple] = []
        self.limit_n: Optional[int] = None
        self.offset_n = 0
        self.on_conflict: Optional[str] = None
        self.ignore_duplicates = False

    # builders
    def select(self, columns: str = "*", **kwargs):
        cols = [c.strip() for c in columns.split(",")]
        self.columns = None if "*" in cols else cols
        return self

    def insert(self, payload, **kwargs):
        self.operation, self.payload = "insert", payload
        return self

    def update(self, values, **kwargs):
        self.operation, self.payload = "update", values
        return self

    def upsert(self, payload, on_conflict: str = "", ignore_duplicates: bool = False, **kwargs):
        self.operation, self.payload = "upsert", payload
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def delete(self, **kwargs):
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

    def is_(self, column, value):
        if value in ("null", None):
            self.filters.append(lambda row: row.get(column) is None)
        else:
            self.filters.append(lambda row: row.get(column) is value)
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self.order_by.append((column, desc))
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def offset(self, n):
        self.offset_n = n
        return self

    # execution
    def _matching(self) -> List[Dict[str, Any]]:
        return [r for r in self.db.tables.setdefault(self.table_name, []) if all(f(r) for f in self.filters)]

    def _project(self, row):
        if self.columns is None:
            return copy.deepcopy(row)
        return {c: copy.deepcopy(row.get(c)) for c in self.columns}

    def execute(self):
        handler = getattr(self, f"_execute_{self.operation}")
        return SimpleNamespace(data=handler(), count=None)

    def _execute_select(self):
        rows = self._matching()
        for column, desc in reversed(self.order_by):
            rows = sorted(rows, key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        rows = rows[self.offset_n:]
        if self.limit_n is not None:
            rows = rows[:self.limit_n]
        return [self._project(r) for r in rows]

    def _execute_insert(self):
        rows = self.payload if isinstance(self.payload, list) else [self.payload]
        return [self.db.insert_row(self.table_name, row) for row in rows]

    def _execute_update(self):
        updated = []
        for row in self._matching():
            candidate = {**row, **self.payload}
            self.db.check_unique(self.table_name, candidate, ignore=row)
            row.update(copy.deepcopy(self.payload))
            updated.append(copy.deepcopy(row))
        return updated

    def _execute_upsert(self):
        rows = self.payload if isinstance(self.payload, list) else [self.payload]
        keys = [k.strip() for k in (self.on_conflict or "id").split(",")]
        result = []
        for row in rows:
            existing = [
                r for r in self.db.tables.setdefault(self.table_name, [])
                if all(r.get(k) == row.get(k) and row.get(k) is not None for k in keys)
            ]
            if existing:
                if self.ignore_duplicates:
                    continue
                existing[0].update(copy.deepcopy(row))
                result.append(copy.deepcopy(existing[0]))
            else:
                result.append(self.db.insert_row(self.table_name, row))
        return result

    def _execute_delete(self):
        deleted = self._matching()
        for row in deleted:
            self.db.delete_row(self.table_name, row)
        return [copy.deepcopy(r) for r in deleted]


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        # One-shot callbacks run before the next insert into a table (race simulation)
        self.before_insert: Dict[str, List[Callable[["FakeSupabase", Dict[str, Any]], None]]] = {}
        self._in_hook = False

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def _next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def check_unique(self, table: str, row: Dict[str, Any], ignore: Optional[Dict[str, Any]] = None):
        for columns in UNIQUE_CONSTRAINTS.get(table, []):
            values = tuple(row.get(c) for c in columns)
            if any(v is None for v in values):
                continue  # NULLs never collide
            for other in self.tables.get(table, []):
                if other is ignore:
                    continue
                if tuple(other.get(c) for c in columns) == values:
                    raise unique_violation(table)

    def insert_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        hooks = self.before_insert.get(table)
        if hooks and not self._in_hook:
            hook = hooks.pop(0)
            self._in_hook = True
            try:
                hook(self, row)
            finally:
                self._in_hook = False
        record = {**DEFAULTS.get(table, {}), **copy.deepcopy(row)}
        record.setdefault("id", str(uuid.uuid4()))
        record.setdefault("created_at", self._next_timestamp())
        self.check_unique(table, record)
        self.tables.setdefault(table, []).append(record)
        return copy.deepcopy(record)

    def delete_row(self, table: str, row: Dict[str, Any]) -> None:
        rows = self.tables.get(table, [])
        if row in rows:
            rows.remove(row)
        for child_table, column in CASCADES.get(table, []):
            for child in [c for c in self.tables.get(child_table, []) if c.get(column) == row.get("id")]:
                self.delete_row(child_table, child)

    def rows(self, table: str, **where) -> List[Dict[str, Any]]:
        return [r for r in self.tables.get(table, []) if all(r.get(k) == v for k, v in where.items())]


class FakeAuthService:
    def __init__(self, db: FakeSupabase):
        self.db = db
        self.users: Dict[str, Dict[str, Any]] = {}
        self.deleted: List[str] = []

    def add_user(self, token: str, user_id: str, email: str, name: Optional[str] = None, app_metadata=None):
        self.users[token] = {
            "id": user_id,
            "email": email,
            "user_metadata": {"name": name} if name else {},
            "app_metadata": app_metadata or {},
        }

    def get_current_user(self, token: str) -> Dict[str, Any]:
        if token not in self.users:
            raise Unauthorized("Invalid or expired token")
        return self.users[token]

    def delete_auth_user(self, user_id: str) -> None:
        self.deleted.append(user_id)
        for row in self.db.rows("profiles", id=user_id):
            self.db.delete_row("profiles", row)


class World:
    """A seeded group: alice owns it, bob is admin, carol and dave are members, erin is outside, root is global admin."""

    def __init__(self, db: FakeSupabase, auth: FakeAuthService):
        self.db = db
        self.auth = auth
        self.ids: Dict[str, str] = {}
        for name in ("alice", "bob", "carol", "dave", "erin", "root"):
            user_id = str(uuid.uuid4())
            self.ids[name] = user_id
            email = f"{name}@example.com"
            db.insert_row("profiles", {"id": user_id, "email": email, "name": name.title()})
            auth.add_user(f"token-{name}", user_id, email, name=name.title())
        db.insert_row("user_roles", {"user_id": self.ids["root"], "group_id": None, "role": "admin"})

        self.group_id = db.insert_row("groups", {"name": "Family", "owner_id": self.ids["alice"]})["id"]
        for name, role in (("alice", "owner"), ("bob", "admin"), ("carol", "member"), ("dave", "member")):
            db.insert_row("group_members", {"group_id": self.group_id, "user_id": self.ids[name]})
            db.insert_row("user_roles", {"user_id": self.ids[name], "group_id": self.group_id, "role": role})

        self.wishlist_id = db.insert_row("wishlists", {
            "user_id": self.ids["alice"], "group_id": self.group_id,
            "name": "Alice's Wishlist", "is_default": True,
        })["id"]
        self.single_item_id = db.insert_row("items", {
            "wishlist_id": self.wishlist_id, "title": "Record player", "price": 120.0,
        })["id"]
        self.multi_item_id = db.insert_row("items", {
            "wishlist_id": self.wishlist_id, "title": "Books", "allow_multiple_claims": True,
        })["id"]

    def headers(self, name: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer token-{name}"}


def future_date(days: int = 30) -> str:
    return (datetime.now(timezone.utc).date() + timedelta(days=days)).isoformat()


def past_date(days: int = 1) -> str:
    return (datetime.now(timezone.utc).date() - timedelta(days=days)).isoformat()


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def fake_auth(db):
    return FakeAuthService(db)


@pytest.fixture
def world(db, fake_auth):
    return World(db, fake_auth)


@pytest.fixture
def client(db, fake_auth):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_auth_service] = lambda: fake_auth
    app.dependency_overrides[get_admin_auth_service] = lambda: fake_auth
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True
