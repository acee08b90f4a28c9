"""全局 pytest 配置 -- 临时 SQLite 数据库 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from clawcontrol.core.store import StoreGroup, create_store_group


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def sqlite_url(tmp_db_path: Path) -> str:
    """提供指向临时数据库的 DATABASE_URL"""
    return f"sqlite:{tmp_db_path}"


@pytest_asyncio.fixture
async def store_group(sqlite_url: str) -> AsyncGenerator[StoreGroup, None]:
    """提供已完成迁移的 StoreGroup"""
    group = await create_store_group(sqlite_url)
    yield group
    await group.close()
