"""SSE 事件流路由

GET /api/stream[?demo=true]: 连接后先推送 init 快照（tasks/agents/demoMode），
随后推送所有变更事件与心跳注释。demo=true 时为该连接挂载 DemoDriver，
连接关闭时随订阅一并取消。
"""

from collections.abc import AsyncIterator
from contextlib import aclosing

import structlog
from clawcontrol.core.config import get_demo_initial_delay, get_demo_interval_range
from clawcontrol.core.store import StoreGroup
from fastapi import APIRouter, Depends, Query
from sse_starlette.sse import EventSourceResponse

from ..deps import get_sse_hub, get_store_group
from ..services.demo_driver import DemoDriver
from ..services.sse_hub import SSEHub, Subscription, encode_event
from ..services.task_service import TaskService

router = APIRouter()
log = structlog.get_logger()

DEMO_STARTED_MESSAGE = "Demo mode active - tasks will auto-progress"


async def board_event_stream(
    subscription: Subscription,
    store_group: StoreGroup,
    sse_hub: SSEHub,
    demo: bool = False,
) -> AsyncIterator[dict[str, str]]:
    """单个订阅者的事件序列：init -> (demo-started) -> 队列中的事件

    生成器结束（客户端断开或被取消）时取消订阅。
    """
    structlog.contextvars.bind_contextvars(subscription_id=subscription.subscription_id)
    delivered = 0
    try:
        tasks = await store_group.task_store.list_tasks()
        agents = await store_group.agent_store.list_agents()
        yield encode_event(
            "init",
            {
                "tasks": [t.model_dump(mode="json") for t in tasks],
                "agents": [a.model_dump(mode="json") for a in agents],
                "demoMode": demo,
            },
        )
        if demo:
            yield encode_event("demo-started", {"message": DEMO_STARTED_MESSAGE})

        while not subscription.closed:
            message = await subscription.queue.get()
            delivered += 1
            yield message
    finally:
        await sse_hub.unsubscribe(subscription)
        log.info("stream_closed", delivered=delivered)


async def live_board_stream(
    store_group: StoreGroup,
    sse_hub: SSEHub,
    demo: bool = False,
) -> AsyncIterator[dict[str, str]]:
    """首次迭代时才注册订阅（demo 时同时挂载 DemoDriver）

    响应体从未被消费时不会留下订阅或后台任务。订阅先于快照读取，
    快照之后的变更不会丢失。
    """
    subscription = await sse_hub.subscribe()
    try:
        if demo:
            driver = DemoDriver(
                TaskService(store_group, sse_hub),
                initial_delay=get_demo_initial_delay(),
                interval_range=get_demo_interval_range(),
            )
            sse_hub.attach(subscription, driver.run(), name="demo")

        async with aclosing(
            board_event_stream(subscription, store_group, sse_hub, demo)
        ) as stream:
            async for message in stream:
                yield message
    finally:
        await sse_hub.unsubscribe(subscription)


@router.get("/api/stream")
async def stream_events(
    demo: bool = Query(default=False, description="为本连接启用 Demo 自动推进"),
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    """SSE 事件流端点"""
    return EventSourceResponse(live_board_stream(store_group, sse_hub, demo))
