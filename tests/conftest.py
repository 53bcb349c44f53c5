from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from devops_demo.config import get_settings
from devops_demo.main import app
from devops_demo.observability.metrics import reset_metrics


_ENV_VARS = ("HOST", "PORT", "NODE_ENV", "APP_VERSION", "LOG_LEVEL", "NAMESPACE", "POD_NAME", "NODE_NAME")


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the checkout from leaking into settings.
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    reset_metrics()

    yield

    get_settings.cache_clear()
    reset_metrics()


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
