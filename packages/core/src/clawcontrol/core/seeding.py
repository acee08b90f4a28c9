"""Agent 初始化与配置重载

- 启动时：agents 表为空则按配置插入，否则跳过（失败不阻塞启动）
- 重载时：默认按 name upsert，force 模式先清空再重建
"""

import structlog
from pydantic import BaseModel

from .agents_config import load_agents_config
from .models.agent import Agent, AgentDefinition
from .store.agent_store import AgentStore

log = structlog.get_logger()


class ReloadResult(BaseModel):
    """配置重载结果"""

    created: int
    skipped: int
    agents: list[Agent]


async def seed_agents_from_config(
    agent_store: AgentStore,
    definitions: list[AgentDefinition] | None = None,
) -> int:
    """agents 表为空时按配置初始化，返回插入数量

    任何失败只记录日志并返回 0，进程继续启动。
    """
    try:
        count = await agent_store.count_agents()
        if count > 0:
            log.info("agent_seed_skipped", existing=count)
            return 0

        agents = definitions if definitions is not None else load_agents_config()
        for definition in agents:
            await agent_store.create_agent(
                name=definition.name,
                description=definition.description,
                role=definition.role,
                status=definition.status,
                avatar=definition.avatar,
            )
            log.info("agent_seeded", name=definition.name, role=definition.role)
    except Exception as e:
        log.error("agent_seed_failed", error=str(e), error_type=type(e).__name__)
        return 0

    log.info("agent_seed_completed", count=len(agents))
    return len(agents)


async def reload_agents(
    agent_store: AgentStore,
    definitions: list[AgentDefinition],
    force: bool = False,
) -> ReloadResult:
    """按配置重载 Agent

    Args:
        agent_store: AgentStore 实例
        definitions: 配置中的 Agent 定义
        force: True 时清空 agents 表后重建；False 时已存在的 name 跳过

    Returns:
        ReloadResult（created/skipped 计数 + 重载后的全部 Agent）
    """
    if force:
        removed = await agent_store.delete_all_agents()
        log.info("agents_cleared", removed=removed)

    existing = await agent_store.list_agent_names()
    created = 0
    skipped = 0
    for definition in definitions:
        if definition.name in existing and not force:
            skipped += 1
            continue
        await agent_store.upsert_agent(definition)
        created += 1

    agents = await agent_store.list_agents()
    log.info("agents_reloaded", created=created, skipped=skipped, total=len(agents), force=force)
    return ReloadResult(created=created, skipped=skipped, agents=agents)
