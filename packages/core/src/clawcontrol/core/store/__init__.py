"""Claw Control Core Store -- SQLite / PostgreSQL 持久化实现

提供工厂函数创建共享同一存储适配器的 Store 实例组。
"""

from .adapter import (
    PostgresAdapter,
    QueryResult,
    SqliteAdapter,
    StorageAdapter,
    connect_adapter,
)
from .agent_store import AgentStore
from .message_store import MessageStore
from .schema import SCHEMA_SQL, init_db
from .task_store import TaskStore


class StoreGroup:
    """Store 实例组 -- 共享同一个存储适配器"""

    def __init__(self, adapter: StorageAdapter) -> None:
        self.adapter = adapter
        self.task_store = TaskStore(adapter)
        self.agent_store = AgentStore(adapter)
        self.message_store = MessageStore(adapter)

    async def close(self) -> None:
        await self.adapter.close()


async def create_store_group(
    database_url: str,
    strict_tags: bool = False,
) -> StoreGroup:
    """创建 Store 实例组并执行 schema 迁移

    Args:
        database_url: 连接串，sqlite: 前缀选择 SQLite，否则 PostgreSQL
        strict_tags: tags 解码失败时是否抛错

    Returns:
        StoreGroup 实例
    """
    adapter = await connect_adapter(database_url, strict_tags=strict_tags)
    await init_db(adapter)
    return StoreGroup(adapter)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "StorageAdapter",
    "SqliteAdapter",
    "PostgresAdapter",
    "QueryResult",
    "connect_adapter",
    "TaskStore",
    "AgentStore",
    "MessageStore",
    "SCHEMA_SQL",
    "init_db",
]
