"""
Shared fakes for the seedboard tests.

FakeSession stands in for aiohttp.ClientSession (only `get` is used by the
clients); FakeSupabase stands in for the supabase client and applies
upserts with merge-on-conflict semantics like PostgREST.
"""
import asyncio
import json

import pytest

from seedboard import config, db_cache

OPENSEA = "https://opensea.test/api/v2"
STAKING = "https://staking.test/api"


class FakeResponse:
    def __init__(self, status=200, payload=None, text=None):
        self.status = status
        self._payload = payload if payload is not None else {}
        self._text = text

    @property
    def ok(self):
        return 200 <= self.status < 300

    async def json(self, content_type="application/json"):
        return self._payload

    async def text(self):
        return self._text if self._text is not None else json.dumps(self._payload)


class _FakeRequest:
    def __init__(self, session, url, params):
        self.session = session
        self.url = url
        self.params = dict(params or {})

    async def __aenter__(self):
        self.session.in_flight += 1
        self.session.max_in_flight = max(self.session.max_in_flight, self.session.in_flight)
        await asyncio.sleep(0)
        try:
            return self.session.handler(self.url, self.params)
        except BaseException:
            self.session.in_flight -= 1
            raise

    async def __aexit__(self, *exc):
        self.session.in_flight -= 1
        return False


class FakeSession:
    """Routes every GET to handler(url, params) -> FakeResponse (or raises)."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, dict(params or {})))
        return _FakeRequest(self, url, params)

    def calls_to(self, suffix):
        return [c for c in self.calls if c[0].endswith(suffix)]


class _Result:
    def __init__(self, data):
        self.data = data


class _Query:
    def __init__(self, db, table, op, rows=None, on_conflict=None):
        self.db = db
        self.table = table
        self.op = op
        self.rows = rows
        self.on_conflict = on_conflict
        self.filters = []
        self.order_by = None
        self.window = None

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def range(self, start, end):
        self.window = (start, end)
        return self

    def execute(self):
        if self.op == "upsert":
            return self.db._upsert(self.table, self.rows, self.on_conflict)
        rows = [dict(r) for r in self.db.tables.get(self.table, [])
                if all(r.get(c) == v for c, v in self.filters)]
        if self.order_by:
            column, desc = self.order_by
            rows.sort(key=lambda r: r.get(column) or 0, reverse=desc)
        if self.window:
            rows = rows[self.window[0]:self.window[1] + 1]
        return _Result(rows)


class _Table:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def upsert(self, rows, on_conflict=""):
        return _Query(self.db, self.name, "upsert", rows=rows, on_conflict=on_conflict)

    def select(self, columns="*"):
        return _Query(self.db, self.name, "select")


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.upsert_calls = []
        self.fail_upsert_calls = set()

    def table(self, name):
        return _Table(self, name)

    def _upsert(self, table, rows, on_conflict):
        call_index = len(self.upsert_calls)
        self.upsert_calls.append((table, rows))
        if call_index in self.fail_upsert_calls:
            raise RuntimeError(f"simulated failure on upsert call {call_index}")

        rows = rows if isinstance(rows, list) else [rows]
        keys = on_conflict.split(",")
        stored = self.tables.setdefault(table, [])
        for row in rows:
            match = next((s for s in stored if all(s.get(k) == row.get(k) for k in keys)), None)
            if match is not None:
                match.update(row)
            else:
                stored.append(dict(row))
        return _Result(rows)

    def rows(self, table=config.ENTRIES_TABLE):
        return self.tables.get(table, [])

    def meta(self):
        rows = self.rows(config.META_TABLE)
        return rows[0] if rows else None


@pytest.fixture(autouse=True)
def api_bases(monkeypatch):
    monkeypatch.setattr(config, "OPENSEA_API_BASE", OPENSEA)
    monkeypatch.setattr(config, "STAKING_API_BASE", STAKING)
    monkeypatch.setattr(config, "OPENSEA_API_KEY", "test-key")


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeSupabase()
    monkeypatch.setattr(db_cache, "get_client", lambda: db)
    monkeypatch.setattr(db_cache, "is_cache_enabled", lambda: True)
    return db


def listing_for(token_id, contract="0xseed", price_wei=None, image_url=None):
    offer = {"identifierOrCriteria": token_id, "token": contract}
    if image_url:
        offer["imageUrl"] = image_url
    listing = {"protocol_data": {"parameters": {"offer": [offer]}}}
    if price_wei is not None:
        listing["price"] = {"current": {"value": str(price_wei), "currency": "ETH"}}
    return listing
