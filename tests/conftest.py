"""Shared fixtures: test settings, an in-memory Supabase stand-in and an API client."""

import os
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional, Set

import pytest
from fastapi.testclient import TestClient

# settings are read at import time, so these must exist before any app import
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-service-key")
os.environ.setdefault("CLERK_JWKS_URL", "https://example.clerk.accounts.dev/.well-known/jwks.json")

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Fake Supabase client
# ============================================================================


class FakeQuery:
    """Chainable subset of the postgrest query builder used by the services"""

    def __init__(self, client: "FakeSupabaseClient", table: str):
        self.client = client
        self.table = table
        self.filters: List[tuple] = []
        self.order_by: Optional[tuple] = None
        self.action = "select"
        self.values: Dict[str, Any] = {}

    def select(self, *columns, **kwargs) -> "FakeQuery":
        self.action = "select"
        return self

    def update(self, values: Dict[str, Any]) -> "FakeQuery":
        self.action = "update"
        self.values = values
        return self

    def insert(self, values: Dict[str, Any]) -> "FakeQuery":
        self.action = "insert"
        self.values = values
        return self

    def delete(self) -> "FakeQuery":
        self.action = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    async def execute(self) -> SimpleNamespace:
        self.client.executed.append((self.table, self.action, self.order_by is not None))
        if self.table in self.client.fail_tables:
            raise RuntimeError(f"{self.table} unavailable")
        if self.order_by and self.table in self.client.fail_order_tables:
            raise RuntimeError(f"column {self.order_by[0]} does not exist")

        rows = self.client.tables.setdefault(self.table, [])
        if self.action == "insert":
            row = dict(self.values)
            row.setdefault("id", f"{self.table.lower()}-{len(rows) + 1}")
            rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        matched = [row for row in rows if all(row.get(column) == value for column, value in self.filters)]

        if self.action == "update":
            for row in matched:
                row.update(self.values)
            return SimpleNamespace(data=[dict(row) for row in matched])

        if self.action == "delete":
            self.client.tables[self.table] = [row for row in rows if row not in matched]
            return SimpleNamespace(data=[dict(row) for row in matched])

        result = [dict(row) for row in matched]
        if self.order_by:
            column, desc = self.order_by
            result.sort(key=lambda row: str(row.get(column) or ""), reverse=desc)
        return SimpleNamespace(data=result)


class FakeChannel:
    def __init__(self, topic: str, subscribe_state: str = "SUBSCRIBED", subscribe_error: Optional[Exception] = None):
        self.topic = topic
        self.subscribe_state = subscribe_state
        self.subscribe_error = subscribe_error
        self.listeners: List[Callable[[Dict[str, Any]], None]] = []
        self.bindings: List[Dict[str, Any]] = []
        self.state_callback: Optional[Callable] = None

    def on_postgres_changes(self, event: str, callback: Callable, table: str = "*", schema: str = "public", filter: Optional[str] = None):
        self.bindings.append({"event": event, "table": table, "schema": schema})
        self.listeners.append(callback)
        return self

    async def subscribe(self, callback: Optional[Callable] = None):
        if self.subscribe_error is not None:
            raise self.subscribe_error
        self.state_callback = callback
        if callback:
            callback(self.subscribe_state, None)
        return self

    def emit(self, payload: Optional[Dict[str, Any]] = None) -> None:
        for listener in self.listeners:
            listener(payload or {"eventType": "UPDATE"})


class FakeSupabaseClient:
    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = tables or {}
        self.fail_tables: Set[str] = set()
        self.fail_order_tables: Set[str] = set()
        self.executed: List[tuple] = []
        self.channels: List[FakeChannel] = []
        self.removed_channels: List[FakeChannel] = []
        self.channel_kwargs: Dict[str, Any] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def channel(self, topic: str, params: Optional[Dict[str, Any]] = None) -> FakeChannel:
        channel = FakeChannel(topic, **self.channel_kwargs)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel: FakeChannel) -> None:
        self.removed_channels.append(channel)

    async def remove_all_channels(self) -> None:
        for channel in self.channels:
            if channel not in self.removed_channels:
                self.removed_channels.append(channel)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fake_supabase() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def bookings_state():
    from app.services.booking_feed_services import BookingsState

    return BookingsState(tz=timezone.utc, clock=lambda: NOW)


@pytest.fixture
def api_app(fake_supabase, bookings_state):
    """FastAPI app wired to the fakes; the lifespan is not run"""
    from app.main import app as fastapi_app
    from app.utils.supabase_client_handlers import get_supabase_client
    from app.utils.user_auth import get_current_admin_id

    async def override_supabase():
        return fake_supabase

    fastapi_app.dependency_overrides[get_supabase_client] = override_supabase
    fastapi_app.dependency_overrides[get_current_admin_id] = lambda: "user_admin_test"
    fastapi_app.state.bookings_state = bookings_state

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(api_app) -> TestClient:
    return TestClient(api_app)
