from contextlib import contextmanager
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session

from ringsledger.config import settings
from ringsledger.db.database import get_session
from ringsledger.main import app
from ringsledger.models.card import RingsCard
from ringsledger.models.db import Base
from ringsledger.services.family_auth import issue_session_token

TEST_PASSCODE = "mellon"


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def family_passcode(monkeypatch: pytest.MonkeyPatch) -> str:
    """Configure the family passcode for the duration of a test."""
    monkeypatch.setattr(settings, "family_passcode", TEST_PASSCODE)
    return TEST_PASSCODE


@pytest.fixture
async def anon_client(async_engine, family_passcode: str):
    """Async test client without a session cookie."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def client(anon_client: AsyncClient) -> AsyncClient:
    """Async test client holding a valid family session cookie."""
    anon_client.cookies.set(settings.session_cookie_name, issue_session_token())
    return anon_client


def card_record(
    code: str,
    name: str,
    type_code: str = "ally",
    sphere_code: str | None = "leadership",
    pack_code: str = "Core",
    **extra: Any,
) -> dict[str, Any]:
    """A card record shaped like the RingsDB public API's."""
    record: dict[str, Any] = {
        "code": code,
        "name": name,
        "pack_code": pack_code,
        "pack_name": "Core Set",
        "type_code": type_code,
        "type_name": type_code.title(),
        "sphere_code": sphere_code,
        "sphere_name": (sphere_code or "").title() or None,
    }
    record.update(extra)
    return record


@pytest.fixture
def core_cards() -> dict[str, RingsCard]:
    """A handful of Core Set cards keyed by code."""
    records = [
        card_record("01001", "Aragorn", "hero", "leadership", threat=12, willpower=2, attack=3, defense=2, health=5),
        card_record("01005", "Gimli", "hero", "tactics", threat=11, willpower=2, attack=2, defense=2, health=5),
        card_record("01012", "Glorfindel", "hero", "lore", threat=12, willpower=3, attack=3, defense=1, health=5),
        card_record("01016", "Snowbourn Scout", "ally", "leadership", cost=2, willpower=0, attack=0, defense=1, health=1),
        card_record("01017", "Silverlode Archer", "ally", "leadership", cost=3, willpower=1, attack=2, defense=0, health=1),
        card_record("01020", "Ever Vigilant", "event", "leadership", cost=1),
        card_record("01026", "Steward of Gondor", "attachment", "leadership", cost=2),
        card_record("01073", "Gandalf", "ally", "neutral", cost=5, willpower=4, attack=4, defense=4, health=4),
    ]
    return {record["code"]: RingsCard.from_api(record) for record in records}


@pytest.fixture
def make_card_record():
    """Factory for RingsDB-shaped card records."""
    return card_record


@pytest.fixture
def failing_flushes():
    """Context manager factory under which every ORM flush raises a database error."""

    @contextmanager
    def armed():
        def raise_error(session, flush_context, instances):
            raise OperationalError("UPDATE campaign_scenarios", {}, Exception("database is locked"))

        event.listen(Session, "before_flush", raise_error)
        try:
            yield
        finally:
            event.remove(Session, "before_flush", raise_error)

    return armed
