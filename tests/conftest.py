"""
Pytest configuration and shared fixtures.

The API runs against FakeSupabase: an in-memory table that understands the
PostgREST builder calls the repository makes (eq, contains, gte, lte,
text_search, order, range, count, insert/update/delete, maybe_single), so the
HTTP tests exercise real filtering and pagination without a Supabase project.
"""
import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from supabase import AuthApiError

from config import Settings
from main import create_app

USER_A = str(uuid4())
USER_B = str(uuid4())
TOKENS = {"token-a": USER_A, "token-b": USER_B}

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _ts(value):
    return datetime.fromisoformat(value) if isinstance(value, str) else value


class FakeQuery:
    def __init__(self, store, op, payload=None, count=None, head=False):
        self.store = store
        self.op = op
        self.payload = payload
        self.count = count
        self.head = head
        self.predicates = []
        self.calls = []
        self.ordering = None
        self.window = None
        self.single = False

    def _where(self, name, predicate, *args):
        self.calls.append((name,) + args)
        self.predicates.append(predicate)
        return self

    def eq(self, column, value):
        return self._where("eq", lambda row: row.get(column) == value, column, value)

    def contains(self, column, values):
        return self._where("contains", lambda row: all(v in row.get(column, []) for v in values), column, values)

    def gte(self, column, value):
        return self._where("gte", lambda row: _ts(row[column]) >= _ts(value), column, value)

    def lte(self, column, value):
        return self._where("lte", lambda row: _ts(row[column]) <= _ts(value), column, value)

    def text_search(self, column, query, options=None):
        words = query.lower().split()

        def matches(row):
            text = f"{row['title']} {row['content']}".lower().split()
            return all(word in text for word in words)

        return self._where("text_search", matches, column, query)

    def order(self, column, desc=False):
        self.calls.append(("order", column, desc))
        self.ordering = (column, desc)
        return self

    def range(self, start, end):
        self.calls.append(("range", start, end))
        self.window = (start, end)
        return self

    def maybe_single(self):
        self.single = True
        return self

    def _matching(self):
        return [row for row in self.store.rows if all(p(row) for p in self.predicates)]

    def execute(self):
        if self.store.fail:
            raise RuntimeError("store unavailable")
        self.store.executed.append(self)

        if self.op == "insert":
            row = self.store.add_row(**self.payload)
            return SimpleNamespace(data=[dict(row)], count=None)

        matching = self._matching()

        if self.op == "update":
            for row in matching:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(row) for row in matching], count=None)

        if self.op == "delete":
            self.store.rows = [row for row in self.store.rows if row not in matching]
            return SimpleNamespace(data=[dict(row) for row in matching], count=None)

        total = len(matching) if self.count else None
        if self.ordering:
            column, desc = self.ordering
            matching = sorted(matching, key=lambda row: _ts(row[column]), reverse=desc)
        if self.window:
            start, end = self.window
            matching = matching[start:end + 1]
        if self.single:
            return SimpleNamespace(data=dict(matching[0]), count=None) if matching else None
        data = [] if self.head else [dict(row) for row in matching]
        return SimpleNamespace(data=data, count=total)


class FakeTable:
    def __init__(self, store):
        self.store = store

    def select(self, *columns, count=None, head=False):
        return FakeQuery(self.store, "select", count=count, head=head)

    def insert(self, payload):
        return FakeQuery(self.store, "insert", payload=payload)

    def update(self, payload):
        return FakeQuery(self.store, "update", payload=payload)

    def delete(self):
        return FakeQuery(self.store, "delete")


class FakeAuth:
    def __init__(self, tokens):
        self.tokens = tokens

    def get_user(self, jwt):
        if jwt not in self.tokens:
            raise AuthApiError("invalid JWT: unable to parse or verify signature", 401, "bad_jwt")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[jwt]))


class FakeSupabase:
    def __init__(self, tokens=None):
        self.rows = []
        self.executed = []
        self.fail = False
        self.tables = []
        self.auth = FakeAuth(dict(tokens or TOKENS))
        self._clock = itertools.count()

    def table(self, name):
        self.tables.append(name)
        return FakeTable(self)

    def add_row(self, user_id, title="Entry", content="", mood="Neutral", tags=None,
                image_url=None, created_at=None):
        # Each insert lands one minute after the previous one
        created = created_at or (BASE_TIME + timedelta(minutes=next(self._clock))).isoformat()
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "title": title,
            "content": content,
            "mood": mood,
            "tags": list(tags or []),
            "image_url": image_url,
            "created_at": created,
            "updated_at": created,
        }
        self.rows.append(row)
        return row


@pytest.fixture
def settings():
    return Settings(supabase_url="https://example.supabase.co", supabase_key="test-key", max_page_limit=50)


@pytest.fixture
def store():
    return FakeSupabase()


@pytest.fixture
def app(settings, store):
    return create_app(settings, client=store)


@pytest.fixture
def client_a(app):
    with TestClient(app, headers={"Authorization": "Bearer token-a"}) as client:
        yield client


@pytest.fixture
def client_b(app):
    with TestClient(app, headers={"Authorization": "Bearer token-b"}) as client:
        yield client


@pytest.fixture
def anonymous(app):
    with TestClient(app) as client:
        yield client
