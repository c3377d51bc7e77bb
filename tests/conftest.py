"""
Shared fixtures: an in-memory stand-in for the supabase client so the data
layer can be exercised without a database.
"""

import re
from itertools import count

import pytest

import data_integrator
from config import Settings


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Mimics the supabase-py builder chain for the calls the app makes."""

    def __init__(self, db, table_name):
        self.db = db
        self.table_name = table_name
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.order_by = None
        self.row_limit = None
        self.row_range = None
        self._negate = False

    # operations
    def select(self, *_cols):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters
    def _add(self, predicate):
        if self._negate:
            self._negate = False
            self.filters.append(lambda r: not predicate(r))
        else:
            self.filters.append(predicate)
        return self

    @property
    def not_(self):
        self._negate = True
        return self

    def eq(self, col, val):
        return self._add(lambda r: r.get(col) == val)

    def neq(self, col, val):
        return self._add(lambda r: r.get(col) != val)

    def gte(self, col, val):
        return self._add(lambda r: r.get(col) is not None and r.get(col) >= val)

    def lte(self, col, val):
        return self._add(lambda r: r.get(col) is not None and r.get(col) <= val)

    def ilike(self, col, pattern):
        rx = re.compile("^" + ".*".join(re.escape(p) for p in str(pattern).split("%")) + "$", re.IGNORECASE)
        return self._add(lambda r: r.get(col) is not None and bool(rx.match(str(r.get(col)))))

    def in_(self, col, values):
        values = list(values)
        return self._add(lambda r: r.get(col) in values)

    def is_(self, col, val):
        if val == "null":
            return self._add(lambda r: r.get(col) is None)
        return self._add(lambda r: r.get(col) is val)

    # modifiers
    def order(self, col, desc=False):
        self.order_by = (col, desc)
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def range(self, start, end):
        self.row_range = (start, end)
        return self

    def _matching(self):
        return [r for r in self.db.rows(self.table_name) if all(f(r) for f in self.filters)]

    def execute(self):
        rows = self.db.rows(self.table_name)

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.db.add(self.table_name, item) for item in items]
            return FakeResponse([dict(r) for r in inserted])

        if self.op == "upsert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = (self.on_conflict or "id").split(",")
            out = []
            for item in items:
                existing = next((r for r in rows if all(r.get(k) == item.get(k) for k in keys)), None)
                if existing is not None:
                    existing.update(item)
                    out.append(dict(existing))
                else:
                    out.append(dict(self.db.add(self.table_name, item)))
            return FakeResponse(out)

        matched = self._matching()

        if self.op == "update":
            for r in matched:
                r.update(self.payload)
            return FakeResponse([dict(r) for r in matched])

        if self.op == "delete":
            for r in matched:
                rows.remove(r)
            return FakeResponse([dict(r) for r in matched])

        if self.order_by:
            col, desc = self.order_by
            present = [r for r in matched if r.get(col) is not None]
            missing = [r for r in matched if r.get(col) is None]
            matched = sorted(present, key=lambda r: r[col], reverse=desc) + missing
        if self.row_range:
            start, end = self.row_range
            matched = matched[start:end + 1]
        if self.row_limit is not None:
            matched = matched[:self.row_limit]
        return FakeResponse([dict(r) for r in matched])


class FakeSchema:
    def __init__(self, db):
        self.db = db

    def table(self, name):
        return FakeQuery(self.db, name)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self._ids = count(1)

    def schema(self, _name):
        return FakeSchema(self)

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, name):
        return self.tables.setdefault(name, [])

    def add(self, name, item):
        row = dict(item)
        row.setdefault("id", f"{name}-{next(self._ids)}")
        self.rows(name).append(row)
        return row

    def seed(self, name, items):
        return [self.add(name, item) for item in items]


@pytest.fixture
def settings():
    return Settings(
        supabase_url="http://localhost:54321",
        supabase_key="test-key",
        schema="public",
        default_unit_price=100000,
        base_currency="IDR",
        business_name="Nihong Jastip",
        business_address="Depok/Jakarta/Kendal",
        business_contact="jastipnihong@gmail.com",
        log_level="INFO",
    )


@pytest.fixture
def fake_db(monkeypatch, settings):
    """data_integrator wired to an empty in-memory database."""
    db = FakeSupabase()
    monkeypatch.setattr(data_integrator, "get_supabase", lambda: db)
    monkeypatch.setattr(data_integrator, "get_settings", lambda: settings)
    return db
