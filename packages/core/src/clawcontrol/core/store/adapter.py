"""存储适配器 -- SQLite (aiosqlite) / PostgreSQL (psycopg) 双后端

根据 DATABASE_URL 在进程启动时选定引擎：
- sqlite:./path/to/file.db -> SQLite
- postgresql://...          -> PostgreSQL

两种后端对外提供相同的 execute() 契约，返回形状一致的 QueryResult。
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import aiosqlite
import psycopg
import structlog
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from ..config import SQLITE_URL_PREFIX
from ..exceptions import StorageError
from .dialect import (
    StatementKind,
    classify_statement,
    is_procedural_block,
    is_unsupported_on_sqlite,
    normalize_row,
    serialize_sqlite_params,
    split_script,
    translate_for_sqlite,
    translate_placeholders,
)

log = structlog.get_logger()


@dataclass
class QueryResult:
    """统一查询结果"""

    rows: list[dict[str, Any]] = field(default_factory=list)
    affected_count: int = 0
    last_insert_id: int | None = None


class StorageAdapter(Protocol):
    """存储适配器接口"""

    engine: str

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """执行 PostgreSQL 方言 + $n 占位符的查询模板"""
        ...

    async def run_migration(self, script: str) -> None:
        """执行多语句迁移脚本（可重复执行）"""
        ...

    async def ping(self) -> None:
        """连通性检查，失败抛出 StorageError"""
        ...

    async def close(self) -> None:
        """关闭连接"""
        ...


class SqliteAdapter:
    """SQLite 后端 -- 方言改写 + ? 占位符 + 按语句类型分路执行

    所有请求共享同一个连接：execute -> fetch -> commit/rollback 在锁内串行完成，
    rollback 只会撤销当前语句。
    """

    engine = "sqlite"

    def __init__(self, conn: aiosqlite.Connection, strict_tags: bool = False) -> None:
        self._conn = conn
        self._strict_tags = strict_tags
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(cls, path: str, strict_tags: bool = False) -> "SqliteAdapter":
        """打开数据库文件（必要时创建父目录）并设置 PRAGMA"""
        if path != ":memory:":
            db_path = Path(path).expanduser().resolve()
            db_path.parent.mkdir(parents=True, exist_ok=True)
            path = str(db_path)

        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode = WAL;")
        await conn.execute("PRAGMA foreign_keys = ON;")
        await conn.execute("PRAGMA busy_timeout = 5000;")
        log.info("database_connected", engine=cls.engine, path=path)
        return cls(conn, strict_tags=strict_tags)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        query, ordered = translate_placeholders(sql, params, marker="?")
        query = translate_for_sqlite(query)
        bound = serialize_sqlite_params(ordered)
        kind = classify_statement(query)

        async with self._lock:
            try:
                cursor = await self._conn.execute(query, bound)
                if kind is StatementKind.WRITE:
                    result = QueryResult(
                        affected_count=cursor.rowcount,
                        last_insert_id=cursor.lastrowid,
                    )
                else:
                    rows = await cursor.fetchall()
                    result = QueryResult(
                        rows=[normalize_row(dict(row), self._strict_tags) for row in rows],
                        affected_count=len(rows) if kind is StatementKind.RETURNING else 0,
                    )
                await cursor.close()
                if kind is not StatementKind.READ:
                    await self._conn.commit()
            except aiosqlite.Error as e:
                log.error("sqlite_query_failed", error=str(e), query=query)
                if kind is not StatementKind.READ:
                    await self._conn.rollback()
                raise StorageError(str(e)) from e
        return result

    async def run_migration(self, script: str) -> None:
        async with self._lock:
            for statement in split_script(script):
                if is_procedural_block(statement):
                    log.info("migration_statement_skipped", reason="procedural_block")
                    continue
                converted = translate_for_sqlite(statement)
                if is_unsupported_on_sqlite(converted):
                    log.info(
                        "migration_statement_skipped",
                        reason="unsupported_on_sqlite",
                        statement=converted[:80],
                    )
                    continue
                try:
                    await self._conn.execute(converted)
                except aiosqlite.Error as e:
                    if "already exists" in str(e):
                        continue
                    log.error("migration_statement_failed", error=str(e), statement=converted)
                    raise StorageError(str(e)) from e
            await self._conn.commit()

    async def ping(self) -> None:
        await self.execute("SELECT 1")

    async def close(self) -> None:
        await self._conn.close()


class PostgresAdapter:
    """PostgreSQL 后端 -- psycopg 异步连接池，autocommit + dict 行"""

    engine = "postgres"

    def __init__(self, pool: AsyncConnectionPool, strict_tags: bool = False) -> None:
        self._pool = pool
        self._strict_tags = strict_tags

    @classmethod
    async def connect(cls, url: str, strict_tags: bool = False) -> "PostgresAdapter":
        pool = AsyncConnectionPool(
            conninfo=url,
            kwargs={"autocommit": True, "row_factory": dict_row},
            open=False,
        )
        await pool.open(wait=True)
        log.info("database_connected", engine=cls.engine)
        return cls(pool, strict_tags=strict_tags)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        # psycopg 使用 %s 占位符，字面量 % 需要转义
        query, ordered = translate_placeholders(sql.replace("%", "%%"), params, marker="%s")
        try:
            async with self._pool.connection() as conn:
                cursor = await conn.execute(query, ordered)
                rows = await cursor.fetchall() if cursor.description else []
                return QueryResult(
                    rows=[normalize_row(row, self._strict_tags) for row in rows],
                    affected_count=max(cursor.rowcount, 0),
                )
        except psycopg.Error as e:
            log.error("postgres_query_failed", error=str(e), query=sql)
            raise StorageError(str(e)) from e

    async def run_migration(self, script: str) -> None:
        try:
            async with self._pool.connection() as conn:
                await conn.execute(script)
        except psycopg.Error as e:
            log.error("migration_failed", engine=self.engine, error=str(e))
            raise StorageError(str(e)) from e

    async def ping(self) -> None:
        await self.execute("SELECT 1")

    async def close(self) -> None:
        await self._pool.close()


def is_sqlite_url(database_url: str) -> bool:
    return database_url.startswith(SQLITE_URL_PREFIX)


def sqlite_path_from_url(database_url: str) -> str:
    """sqlite:./x.db / sqlite:///abs/x.db / sqlite::memory: -> 文件路径"""
    path = database_url[len(SQLITE_URL_PREFIX):]
    if path.startswith("//"):
        path = path[2:]
    return path or ":memory:"


async def connect_adapter(
    database_url: str,
    strict_tags: bool = False,
) -> SqliteAdapter | PostgresAdapter:
    """按连接串选择并创建存储适配器（进程生命周期内固定）"""
    if is_sqlite_url(database_url):
        return await SqliteAdapter.connect(
            sqlite_path_from_url(database_url), strict_tags=strict_tags
        )
    return await PostgresAdapter.connect(database_url, strict_tags=strict_tags)
