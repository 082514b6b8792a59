"""Shared test fixtures for backend tests."""

from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from claimdesk.api.deps import get_db
from claimdesk.main import app


class _ScalarResult:
    def __init__(self, items):
        self._items = list(items)

    def __iter__(self):
        return iter(self._items)

    def scalars(self):
        return iter(self._items)

    def one(self):
        return self._items[0]

    def scalar(self):
        return self._items[0] if self._items else None

    def scalar_one_or_none(self):
        return self._items[0] if self._items else None


class FakeSession:
    """
    Stand-in for an ``AsyncSession`` that keeps added rows in memory.

    ``flush`` assigns integer ids the way the database would, which is all
    the import path needs.  ``execute`` answers with ``execute_results``
    (popped in order) so read endpoints can be fed canned rows.
    """

    def __init__(self):
        self.added: list = []
        self.flushes = 0
        self.execute_results: list = []
        self._next_id = 1

    def add(self, obj) -> None:
        self.added.append(obj)

    def add_all(self, objs) -> None:
        self.added.extend(objs)

    async def flush(self) -> None:
        self.flushes += 1
        for obj in self.added:
            if getattr(obj, "id", None) is None:
                obj.id = self._next_id
                self._next_id += 1
            if hasattr(obj, "created_at") and obj.created_at is None:
                obj.created_at = datetime(2024, 1, 15, 9, 30)

    async def execute(self, statement):
        items = self.execute_results.pop(0) if self.execute_results else []
        return _ScalarResult(items)

    async def get(self, model, ident):
        for obj in self.added:
            if isinstance(obj, model) and obj.id == ident:
                return obj
        return None

    async def delete(self, obj) -> None:
        self.added.remove(obj)

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass

    def of_type(self, model) -> list:
        return [obj for obj in self.added if isinstance(obj, model)]


def _override_db(session):
    """Create a dependency override for get_db."""
    async def _get_db():
        yield session
    return _get_db


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest_asyncio.fixture
async def client(fake_session: FakeSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to an in-memory session."""
    app.dependency_overrides[get_db] = _override_db(fake_session)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_csv() -> bytes:
    return (
        "Account,Patient Name,DOS,Billed,Paid,Notes\n"
        "A1,Jane Doe,2024-01-15,$150.00,125.50,\n"
        "A2,John Roe,01/20/2024,\"($42.10)\",0,refund issued\n"
    ).encode("utf-8")
