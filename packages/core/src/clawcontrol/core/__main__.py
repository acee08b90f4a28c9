"""CLI 入口模块 -- python -m clawcontrol.core <command>

支持的命令：
  migrate          执行 schema 迁移（可重复执行）
  seed             agents 表为空时按 agents.yaml 初始化
  reload [--force] 按 agents.yaml 重载 Agent（--force 清空后重建）
"""

import asyncio
import sys

from .config import get_database_url, get_strict_tags

USAGE = """用法: python -m clawcontrol.core <command>
命令:
  migrate          执行 schema 迁移
  seed             agents 表为空时按配置初始化
  reload [--force] 按配置重载 Agent"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "migrate":
        asyncio.run(migrate())
    elif command == "seed":
        asyncio.run(seed())
    elif command == "reload":
        asyncio.run(reload(force="--force" in sys.argv[2:]))
    else:
        print(f"未知命令: {command}")
        print(USAGE)
        sys.exit(1)


async def migrate() -> None:
    """执行 schema 迁移（create_store_group 内完成）"""
    from .store import create_store_group

    database_url = get_database_url()
    print(f"数据库: {database_url}")
    store_group = await create_store_group(database_url, strict_tags=get_strict_tags())
    try:
        print(f"迁移完成 ({store_group.adapter.engine})")
    finally:
        await store_group.close()


async def seed() -> None:
    """按配置初始化 Agent"""
    from .seeding import seed_agents_from_config
    from .store import create_store_group

    store_group = await create_store_group(get_database_url(), strict_tags=get_strict_tags())
    try:
        created = await seed_agents_from_config(store_group.agent_store)
        print(f"初始化完成，新增 {created} 个 Agent")
    finally:
        await store_group.close()


async def reload(force: bool = False) -> None:
    """按配置重载 Agent"""
    from .agents_config import load_agents_config
    from .seeding import reload_agents
    from .store import create_store_group

    store_group = await create_store_group(get_database_url(), strict_tags=get_strict_tags())
    try:
        result = await reload_agents(store_group.agent_store, load_agents_config(), force=force)
        print(
            f"重载完成：新增/更新 {result.created}，跳过 {result.skipped}，"
            f"共 {len(result.agents)} 个 Agent"
        )
    finally:
        await store_group.close()


if __name__ == "__main__":
    main()
