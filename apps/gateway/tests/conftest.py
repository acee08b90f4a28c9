"""apps/gateway 测试配置 -- httpx AsyncClient + 临时数据库"""

import json
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from clawcontrol.core.store import StoreGroup
from clawcontrol.gateway.services.sse_hub import SSEHub, Subscription
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def sse_hub() -> AsyncGenerator[SSEHub, None]:
    """关闭心跳的 SSEHub，避免测试中产生额外事件"""
    hub = SSEHub(heartbeat_interval=0)
    yield hub
    await hub.close()


@pytest_asyncio.fixture
async def app(store_group: StoreGroup, sse_hub: SSEHub, monkeypatch):
    """创建测试用 FastAPI app，手动初始化 lifespan 状态"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from clawcontrol.gateway.main import create_app

    application = create_app()
    application.state.store_group = store_group
    application.state.sse_hub = sse_hub
    yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def listener(sse_hub: SSEHub) -> Subscription:
    """旁听广播的订阅者"""
    return await sse_hub.subscribe()


def _drain(subscription: Subscription) -> list[tuple[str, dict]]:
    """取出订阅队列中已有的全部事件，返回 (事件名, 解码后的 data)"""
    events = []
    while not subscription.queue.empty():
        message = subscription.queue.get_nowait()
        if "event" in message:
            events.append((message["event"], json.loads(message["data"])))
    return events


@pytest.fixture
def drain():
    return _drain
