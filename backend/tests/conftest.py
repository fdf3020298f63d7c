from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

from reviewguard.infra.redis import redis_client, set_redis_client
from reviewguard.main import app
from reviewguard.moderation.domain import container
from reviewguard.moderation.domain.notifier import ContactMessage, Notifier
from reviewguard.moderation.domain.reviews import InMemoryUserDirectory, ReviewRecord, UserSummary
from reviewguard.settings import settings


class RecordingNotifier(Notifier):
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.published: list[ReviewRecord] = []
        self.contacts: list[ContactMessage] = []

    async def review_published(self, record: ReviewRecord) -> None:
        if self.fail:
            raise ConnectionError("smtp down")
        self.published.append(record)

    async def contact_message(self, contact: ContactMessage) -> None:
        if self.fail:
            raise ConnectionError("smtp down")
        self.contacts.append(contact)


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
    original = redis_client.client
    client = FakeRedis(decode_responses=True)
    set_redis_client(client)
    try:
        yield client
    finally:
        set_redis_client(original)
        await client.flushall()


@pytest.fixture(autouse=True)
def force_test_settings():
    """API tests authenticate via X-User-Id/X-User-Roles, which only dev accepts."""
    original_env = settings.environment
    settings.environment = "dev"
    try:
        yield
    finally:
        settings.environment = original_env


@pytest.fixture(autouse=True)
def memory_container():
    container.reset_memory_state()
    yield
    container.reset_memory_state()


@pytest.fixture
def notifier() -> RecordingNotifier:
    recording = RecordingNotifier()
    container.configure(notifier=recording)
    return recording


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    current = container.get_directory()
    assert isinstance(current, InMemoryUserDirectory)
    return current


@pytest.fixture
def make_user(directory: InMemoryUserDirectory) -> Callable[..., UserSummary]:
    def _make(user_id: str, *, role: str = "USER", age_days: float = 90, email: str | None = None) -> UserSummary:
        created = datetime.now(timezone.utc) - timedelta(days=age_days)
        return directory.add(UserSummary(id=user_id, role=role, created_at=created, email=email))

    return _make


@pytest.fixture
def community(make_user):
    """An eligible recipient, an established author, and a brand new author."""
    return {
        "artist": make_user("artist-1", role="ARTIST", age_days=400, email="artist@example.com"),
        "artist_2": make_user("artist-2", role="ARTIST", age_days=400),
        "artist_3": make_user("artist-3", role="ARTIST", age_days=400),
        "artist_4": make_user("artist-4", role="ARTIST", age_days=400),
        "veteran": make_user("veteran", age_days=90),
        "newbie": make_user("newbie", age_days=0),
    }


@pytest_asyncio.fixture
async def api_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
