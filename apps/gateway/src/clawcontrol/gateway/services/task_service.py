"""TaskService -- 任务创建/更新/删除/推进业务逻辑

所有变更遵循「先持久化、后广播」：只有存储层返回结果行后才推送 SSE 事件，
存储失败时不产生任何广播。
"""

import random

import structlog
from clawcontrol.core.exceptions import RecordNotFoundError, TaskAlreadyCompletedError
from clawcontrol.core.models import Task, TaskProgress, TaskStatus, next_status
from clawcontrol.core.store import StoreGroup

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup, sse_hub=None) -> None:
        self._stores = store_group
        self._sse_hub = sse_hub

    async def _broadcast(self, event: str, payload) -> None:
        if self._sse_hub:
            await self._sse_hub.broadcast(event, payload)

    async def list_tasks(
        self,
        status: str | None = None,
        agent_id: int | None = None,
    ) -> list[Task]:
        return await self._stores.task_store.list_tasks(status=status, agent_id=agent_id)

    async def get_task(self, task_id: int) -> Task | None:
        return await self._stores.task_store.get_task(task_id)

    async def create_task(
        self,
        title: str | None,
        description: str | None = None,
        status: str | None = None,
        tags: list[str] | None = None,
        agent_id: int | None = None,
    ) -> Task:
        """创建任务并广播 task-created"""
        task = await self._stores.task_store.create_task(
            title=title,
            description=description,
            status=status,
            tags=tags,
            agent_id=agent_id,
        )
        log.info("task_created", task_id=task.id, status=task.status)
        await self._broadcast("task-created", task.model_dump(mode="json"))
        return task

    async def update_task(self, task_id: int, **fields) -> Task:
        """部分更新任务并广播 task-updated"""
        task = await self._stores.task_store.update_task(task_id, **fields)
        changed = sorted(k for k, v in fields.items() if v is not None)
        log.info("task_updated", task_id=task.id, fields=changed)
        await self._broadcast("task-updated", task.model_dump(mode="json"))
        return task

    async def delete_task(self, task_id: int) -> Task:
        """删除任务并广播 task-deleted；不存在时抛出 RecordNotFoundError，不广播"""
        task = await self._stores.task_store.delete_task(task_id)
        log.info("task_deleted", task_id=task.id)
        await self._broadcast("task-deleted", {"id": task.id})
        return task

    async def advance_task(self, task_id: int) -> TaskProgress:
        """将任务推进到下一个状态

        Raises:
            RecordNotFoundError: 任务不存在
            TaskAlreadyCompletedError: 任务已在终态（不做任何修改）
        """
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise RecordNotFoundError("task", task_id)
        return await self._advance(task)

    async def complete_task(self, task_id: int) -> Task:
        """直接将任务置为 completed 并广播 task-updated"""
        task = await self._stores.task_store.set_status(task_id, TaskStatus.COMPLETED)
        log.info("task_completed", task_id=task.id)
        await self._broadcast("task-updated", task.model_dump(mode="json"))
        return task

    async def progress_random_task(self, rng: random.Random | None = None) -> TaskProgress | None:
        """随机挑选一个未完成任务推进一步（Demo 模式使用）

        Returns:
            TaskProgress；没有未完成任务时返回 None
        """
        candidates = await self._stores.task_store.list_active_tasks()
        if not candidates:
            return None
        task = (rng or random).choice(candidates)
        return await self._advance(task)

    async def _advance(self, task: Task) -> TaskProgress:
        target = next_status(task.status)
        if target is None:
            raise TaskAlreadyCompletedError(task)

        updated = await self._stores.task_store.set_status(task.id, target)
        log.info(
            "task_status_advanced",
            task_id=task.id,
            from_status=task.status,
            to_status=target,
        )
        await self._broadcast("task-updated", updated.model_dump(mode="json"))
        return TaskProgress(previous_status=task.status, new_status=target, task=updated)
