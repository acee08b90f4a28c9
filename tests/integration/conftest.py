"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from clawcontrol.core.store import StoreGroup
from clawcontrol.gateway.services.sse_hub import SSEHub
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def integration_hub() -> AsyncGenerator[SSEHub, None]:
    hub = SSEHub(heartbeat_interval=0)
    yield hub
    await hub.close()


@pytest_asyncio.fixture
async def integration_app(store_group: StoreGroup, integration_hub: SSEHub, monkeypatch):
    """集成测试用 FastAPI app"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from clawcontrol.gateway.main import create_app

    app = create_app()
    app.state.store_group = store_group
    app.state.sse_hub = integration_hub
    yield app


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
