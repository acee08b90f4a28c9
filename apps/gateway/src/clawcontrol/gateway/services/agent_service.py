"""AgentService -- Agent / 消息 / 配置重载业务逻辑

与 TaskService 相同，先持久化、后广播。
"""

import structlog
from clawcontrol.core.agents_config import find_config_path, load_agents_config
from clawcontrol.core.models import Agent, AgentMessage
from clawcontrol.core.seeding import ReloadResult, reload_agents
from clawcontrol.core.store import StoreGroup

log = structlog.get_logger()


class AgentService:
    """Agent 与消息业务服务"""

    def __init__(self, store_group: StoreGroup, sse_hub=None) -> None:
        self._stores = store_group
        self._sse_hub = sse_hub

    async def _broadcast(self, event: str, payload) -> None:
        if self._sse_hub:
            await self._sse_hub.broadcast(event, payload)

    async def list_agents(self) -> list[Agent]:
        return await self._stores.agent_store.list_agents()

    async def create_agent(self, **fields) -> Agent:
        """创建 Agent 并广播 agent-created"""
        agent = await self._stores.agent_store.create_agent(**fields)
        log.info("agent_created", agent_id=agent.id, name=agent.name)
        await self._broadcast("agent-created", agent.model_dump(mode="json"))
        return agent

    async def update_agent(self, agent_id: int, **fields) -> Agent:
        """部分更新 Agent 并广播 agent-updated"""
        agent = await self._stores.agent_store.update_agent(agent_id, **fields)
        log.info("agent_updated", agent_id=agent.id, status=agent.status)
        await self._broadcast("agent-updated", agent.model_dump(mode="json"))
        return agent

    async def list_messages(self, agent_id: int | None = None, limit: int = 50) -> list[AgentMessage]:
        return await self._stores.message_store.list_messages(agent_id=agent_id, limit=limit)

    async def create_message(self, message: str | None, agent_id: int | None = None) -> AgentMessage:
        """创建消息并广播 message-created"""
        msg = await self._stores.message_store.create_message(message, agent_id=agent_id)
        log.info("message_created", message_id=msg.id, agent_id=msg.agent_id)
        await self._broadcast("message-created", msg.model_dump(mode="json"))
        return msg

    async def reload_from_config(self, force: bool = False) -> tuple[ReloadResult, str | None]:
        """按 agents.yaml 重载 Agent 并广播 agents-reloaded

        Returns:
            (重载结果, 配置文件路径；使用内置默认值时为 None)
        """
        definitions = load_agents_config()
        config_path = find_config_path()
        result = await reload_agents(self._stores.agent_store, definitions, force=force)
        await self._broadcast(
            "agents-reloaded",
            {"agents": [a.model_dump(mode="json") for a in result.agents]},
        )
        return result, str(config_path) if config_path else None
