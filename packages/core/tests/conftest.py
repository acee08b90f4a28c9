"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from clawcontrol.core.store import SqliteAdapter, init_db


@pytest_asyncio.fixture
async def sqlite_adapter(tmp_db_path) -> AsyncGenerator[SqliteAdapter, None]:
    """已迁移的 SQLite 适配器"""
    adapter = await SqliteAdapter.connect(str(tmp_db_path))
    await init_db(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture
def agents_yaml(tmp_path, monkeypatch):
    """写入临时 agents.yaml 并通过 CLAW_AGENTS_CONFIG 指向它"""

    def _write(content: str):
        path = tmp_path / "agents.yaml"
        path.write_text(content, encoding="utf-8")
        monkeypatch.setenv("CLAW_AGENTS_CONFIG", str(path))
        return path

    return _write
