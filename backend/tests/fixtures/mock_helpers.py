"""Helpers for faking the Supabase client in tests."""

import uuid
from contextlib import ExitStack
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import patch

# Every module that calls get_supabase_client() directly
SUPABASE_MODULES = [
    "notifications.recipient_resolver",
    "notifications.notification_store",
    "notifications.quota",
    "notifications.email_dispatcher",
    "notifications.lirf_digest",
    "notifications.unsubscribe_tokens",
]


class FakeResponse:
    def __init__(self, data: Any, count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable stand-in for the postgrest query builder, backed by lists of dicts."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.columns = ["*"]
        self.payload: Any = None
        self.returning = "representation"
        self.count_method: Optional[str] = None
        self.head = False
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orderings: List[tuple] = []
        self.row_limit: Optional[int] = None
        self.single_row = False

    # Operations
    def select(self, *columns, count=None, head=None):
        self.op = "select"
        self.columns = [c.strip() for col in (columns or ("*",)) for c in col.split(",")]
        self.count_method = count
        self.head = bool(head)
        return self

    def insert(self, json, returning="representation", **kwargs):
        self.op = "insert"
        self.payload = json
        self.returning = returning
        return self

    def update(self, json, **kwargs):
        self.op = "update"
        self.payload = json
        return self

    # Filters
    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda r: r.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda r: r.get(column) in values)
        return self

    def is_(self, column, value):
        if value in ("null", None):
            self.filters.append(lambda r: r.get(column) is None)
        else:
            self.filters.append(lambda r: r.get(column) == value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r[column] >= value)
        return self

    def gt(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r[column] > value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r[column] <= value)
        return self

    def lt(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r[column] < value)
        return self

    def or_(self, filters: str):
        """Supports 'col.eq.value,col.eq.value' only."""
        clauses = []
        for clause in filters.split(","):
            column, operator, value = clause.split(".", 2)
            assert operator == "eq", f"unsupported or_ operator {operator}"
            clauses.append((column, value))
        self.filters.append(lambda r: any(str(r.get(c)) == v for c, v in clauses))
        return self

    # Modifiers
    def order(self, column, desc=False, **kwargs):
        self.orderings.append((column, desc))
        return self

    def limit(self, size):
        self.row_limit = size
        return self

    def single(self):
        self.single_row = True
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def _project(self, row):
        if "*" in self.columns:
            return dict(row)
        return {c: row.get(c) for c in self.columns}

    def execute(self) -> FakeResponse:
        error = self.db.errors.get((self.table_name, self.op))
        if error is not None:
            raise error

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            if self.db.insert_hook:
                self.db.insert_hook(self.table_name, new_rows)
            stored = []
            for row in new_rows:
                row = dict(row)
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                for key, factory in self.db.defaults.get(self.table_name, {}).items():
                    row.setdefault(key, factory())
                stored.append(row)
            rows.extend(stored)
            data = [] if self.returning == "minimal" else [dict(r) for r in stored]
            return FakeResponse(data)

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(r) for r in matched])

        # Apply orderings last-to-first so the first order() call is the primary key
        for column, desc in reversed(self.orderings):
            matched.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)

        count = len(matched) if self.count_method else None
        if self.row_limit is not None:
            matched = matched[: self.row_limit]

        data: Any = [] if self.head else [self._project(r) for r in matched]
        if self.single_row:
            if not data:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            data = data[0]
        return FakeResponse(data, count)


class FakeSupabase:
    """
    In-memory Supabase client.

    Attributes:
        tables: table name -> list of row dicts
        errors: (table, op) -> exception raised by execute()
        insert_hook: called with (table, rows) before an insert; may raise
        defaults: table -> {column: factory} applied to inserted rows
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(r) for r in rows] for name, rows in (tables or {}).items()
        }
        self.errors: Dict[tuple, Exception] = {}
        self.insert_hook: Optional[Callable[[str, List[Dict[str, Any]]], None]] = None
        now = lambda: datetime.now(timezone.utc).isoformat()  # noqa: E731
        self.defaults = {"notifications": {"sent_at": now, "updated_at": now}}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.get(name, [])


def patch_supabase(fake: Any) -> ExitStack:
    """Patch get_supabase_client in every notifications module to return `fake`."""
    stack = ExitStack()
    for module in SUPABASE_MODULES:
        stack.enter_context(patch(f"{module}.get_supabase_client", return_value=fake))
    return stack
