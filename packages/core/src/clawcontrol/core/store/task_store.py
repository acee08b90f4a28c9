"""TaskStore -- tasks 表的领域操作

所有查询使用 PostgreSQL 方言 + $n 占位符，由适配器负责后端差异。
部分更新采用 COALESCE 语义：未提供的字段保持原值。
"""

from collections.abc import Iterable

from ..exceptions import MissingFieldError, RecordNotFoundError
from ..models.enums import TaskStatus
from ..models.task import Task
from .adapter import StorageAdapter


class TaskStore:
    """Task 存储"""

    def __init__(self, adapter: StorageAdapter) -> None:
        self._db = adapter

    async def list_tasks(
        self,
        status: str | None = None,
        agent_id: int | None = None,
    ) -> list[Task]:
        """查询任务列表，等值筛选条件以 AND 组合，按 created_at 倒序"""
        conditions: list[str] = []
        params: list = []
        if status:
            params.append(status)
            conditions.append(f"status = ${len(params)}")
        if agent_id is not None:
            params.append(agent_id)
            conditions.append(f"agent_id = ${len(params)}")

        query = "SELECT * FROM tasks"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY created_at DESC, id DESC"

        result = await self._db.execute(query, params)
        return [Task(**row) for row in result.rows]

    async def list_active_tasks(self) -> list[Task]:
        """查询所有未完成的任务"""
        result = await self._db.execute(
            "SELECT * FROM tasks WHERE status <> $1 ORDER BY created_at DESC, id DESC",
            [TaskStatus.COMPLETED.value],
        )
        return [Task(**row) for row in result.rows]

    async def get_task(self, task_id: int) -> Task | None:
        """根据 id 查询任务"""
        result = await self._db.execute("SELECT * FROM tasks WHERE id = $1", [task_id])
        if not result.rows:
            return None
        return Task(**result.rows[0])

    async def create_task(
        self,
        title: str | None,
        description: str | None = None,
        status: str | None = None,
        tags: list[str] | None = None,
        agent_id: int | None = None,
    ) -> Task:
        """创建任务，status 默认 backlog，tags 默认空列表

        Raises:
            MissingFieldError: title 缺失或为空
        """
        if not title or not title.strip():
            raise MissingFieldError("title")

        result = await self._db.execute(
            """
            INSERT INTO tasks (title, description, status, tags, agent_id)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING *
            """,
            [
                title,
                description or None,
                TaskStatus(status or TaskStatus.BACKLOG).value,
                list(tags or []),
                agent_id,
            ],
        )
        return Task(**result.rows[0])

    async def update_task(
        self,
        task_id: int,
        title: str | None = None,
        description: str | None = None,
        status: str | None = None,
        tags: list[str] | None = None,
        agent_id: int | None = None,
    ) -> Task:
        """部分更新任务，None 字段保持原值，updated_at 总是刷新

        Raises:
            RecordNotFoundError: 任务不存在
        """
        result = await self._db.execute(
            """
            UPDATE tasks
            SET title = COALESCE($1, title),
                description = COALESCE($2, description),
                status = COALESCE($3, status),
                tags = COALESCE($4, tags),
                agent_id = COALESCE($5, agent_id),
                updated_at = NOW()
            WHERE id = $6
            RETURNING *
            """,
            [
                title,
                description,
                TaskStatus(status).value if status is not None else None,
                list(tags) if tags is not None else None,
                agent_id,
                task_id,
            ],
        )
        if not result.rows:
            raise RecordNotFoundError("task", task_id)
        return Task(**result.rows[0])

    async def set_status(self, task_id: int, status: TaskStatus) -> Task:
        """直接设置任务状态

        Raises:
            RecordNotFoundError: 任务不存在
        """
        result = await self._db.execute(
            """
            UPDATE tasks
            SET status = $1, updated_at = NOW()
            WHERE id = $2
            RETURNING *
            """,
            [TaskStatus(status).value, task_id],
        )
        if not result.rows:
            raise RecordNotFoundError("task", task_id)
        return Task(**result.rows[0])

    async def delete_task(self, task_id: int) -> Task:
        """删除任务并返回被删除的行

        Raises:
            RecordNotFoundError: 任务不存在
        """
        result = await self._db.execute(
            "DELETE FROM tasks WHERE id = $1 RETURNING *",
            [task_id],
        )
        if not result.rows:
            raise RecordNotFoundError("task", task_id)
        return Task(**result.rows[0])

    async def count_tasks(self, statuses: Iterable[str] | None = None) -> int:
        """统计任务数量，可限定状态集合"""
        if statuses is None:
            result = await self._db.execute("SELECT COUNT(*) AS count FROM tasks")
        else:
            wanted = [TaskStatus(s).value for s in statuses]
            if not wanted:
                return 0
            placeholders = ", ".join(f"${i}" for i in range(1, len(wanted) + 1))
            result = await self._db.execute(
                f"SELECT COUNT(*) AS count FROM tasks WHERE status IN ({placeholders})",
                wanted,
            )
        return int(result.rows[0]["count"])
