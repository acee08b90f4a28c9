"""SSEHub -- 内存中事件广播器

每个订阅者持有一个 Subscription（asyncio.Queue + 后台任务），支持
subscribe/unsubscribe/broadcast。广播是全局的：任何变更推送给所有在线订阅者。
投递为尽力而为、至多一次：队列满时丢弃该订阅者的这条事件，不影响其他订阅者。
"""

import asyncio
import itertools
import json
from collections.abc import Coroutine
from typing import Any

import structlog

log = structlog.get_logger()

# 心跳消息（SSE 注释行）
HEARTBEAT_MESSAGE: dict[str, str] = {"comment": "heartbeat"}


def encode_event(event: str, payload: Any) -> dict[str, str]:
    """序列化为 sse-starlette 可直接发送的事件"""
    return {"event": event, "data": json.dumps(payload, ensure_ascii=False, default=str)}


class Subscription:
    """单个 SSE 连接的订阅状态：connecting -> open -> closed"""

    def __init__(self, subscription_id: int, queue_maxsize: int) -> None:
        self.subscription_id = subscription_id
        self.queue: asyncio.Queue[dict[str, str]] = asyncio.Queue(maxsize=queue_maxsize)
        self.state = "connecting"
        self._tasks: set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self.state == "closed"

    def offer(self, message: dict[str, str]) -> bool:
        """非阻塞入队，队列满或已关闭返回 False"""
        if self.closed:
            return False
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            return False
        return True

    def start_task(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        """启动归属于本订阅的后台任务，关闭时统一取消"""
        task = asyncio.create_task(coro, name=f"sse-{self.subscription_id}-{name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel_tasks(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    @property
    def task_count(self) -> int:
        return len(self._tasks)


class SSEHub:
    """SSE 事件广播器 -- 基于 asyncio.Queue 的发布/订阅模式"""

    def __init__(self, heartbeat_interval: float = 30.0, queue_maxsize: int = 100) -> None:
        self._subscribers: set[Subscription] = set()
        self._heartbeat_interval = heartbeat_interval
        self._queue_maxsize = queue_maxsize
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def is_subscribed(self, subscription: Subscription) -> bool:
        return subscription in self._subscribers

    async def subscribe(self) -> Subscription:
        """注册订阅者并启动心跳

        Returns:
            Subscription 实例，新事件会被推送到其队列
        """
        subscription = Subscription(next(self._ids), self._queue_maxsize)
        self._subscribers.add(subscription)
        subscription.state = "open"
        if self._heartbeat_interval > 0:
            subscription.start_task(self._heartbeat(subscription), "heartbeat")
        log.info(
            "sse_client_connected",
            subscription_id=subscription.subscription_id,
            total=len(self._subscribers),
        )
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        """取消订阅并取消其心跳/Demo 任务（可重复调用）"""
        if subscription.closed:
            return
        subscription.state = "closed"
        subscription.cancel_tasks()
        self._subscribers.discard(subscription)
        log.info(
            "sse_client_disconnected",
            subscription_id=subscription.subscription_id,
            total=len(self._subscribers),
        )

    def attach(
        self,
        subscription: Subscription,
        coro: Coroutine[Any, Any, Any],
        name: str = "worker",
    ) -> asyncio.Task | None:
        """为订阅挂载后台任务（如 Demo 驱动），随订阅关闭而取消"""
        if subscription.closed:
            coro.close()
            return None
        return subscription.start_task(coro, name)

    async def broadcast(self, event: str, payload: Any) -> int:
        """向所有订阅者广播命名事件

        Args:
            event: 事件名（如 task-updated）
            payload: 可 JSON 序列化的数据

        Returns:
            成功入队的订阅者数量
        """
        message = encode_event(event, payload)
        delivered = 0
        for subscription in list(self._subscribers):
            if subscription.offer(message):
                delivered += 1
            else:
                log.warning(
                    "sse_event_dropped",
                    subscription_id=subscription.subscription_id,
                    sse_event=event,
                )
        return delivered

    async def send(self, subscription: Subscription, event: str, payload: Any) -> bool:
        """仅向单个订阅者推送事件"""
        return subscription.offer(encode_event(event, payload))

    async def close(self) -> None:
        """关闭所有订阅（应用关闭时调用）"""
        for subscription in list(self._subscribers):
            await self.unsubscribe(subscription)

    async def _heartbeat(self, subscription: Subscription) -> None:
        """按固定间隔推送心跳注释，与事件活跃度无关"""
        while not subscription.closed:
            await asyncio.sleep(self._heartbeat_interval)
            subscription.offer(HEARTBEAT_MESSAGE)
