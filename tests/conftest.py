from typing import Callable, List

import httpx
import pytest

from licence_admin.core.config import Settings
from licence_admin.db.store import ApplicationStore, seed_records
from licence_admin.main import create_app
from licence_admin.services.http_client import ApiClient

BASE_URL = "http://api.test"


class RecordingSleep:
    """Stands in for asyncio.sleep; records delays without waiting."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
async def make_client(sleep):
    """Factory building an ApiClient over an httpx.MockTransport handler."""
    clients: List[ApiClient] = []

    def factory(handler: Callable, **kwargs) -> ApiClient:
        kwargs.setdefault("sleep", sleep)
        client = ApiClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.aclose()


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, seed_applications=25)


@pytest.fixture
def store() -> ApplicationStore:
    return ApplicationStore(seed_records(25))


@pytest.fixture
def backend(settings, store):
    return create_app(settings_override=settings, store=store)


@pytest.fixture
async def api(settings, backend, sleep):
    async with ApiClient.from_settings(
        settings, transport=httpx.ASGITransport(app=backend), sleep=sleep
    ) as client:
        yield client
