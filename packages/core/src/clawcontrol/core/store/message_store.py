"""MessageStore -- agent_messages 表的领域操作"""

from ..config import MESSAGE_LIST_LIMIT
from ..exceptions import MissingFieldError
from ..models.message import AgentMessage
from .adapter import StorageAdapter


class MessageStore:
    """Agent 消息存储"""

    def __init__(self, adapter: StorageAdapter) -> None:
        self._db = adapter

    async def list_messages(
        self,
        agent_id: int | None = None,
        limit: int = MESSAGE_LIST_LIMIT,
    ) -> list[AgentMessage]:
        """查询消息列表（附带 agent_name），按 created_at 倒序，仅支持条数限制"""
        query = (
            "SELECT m.*, a.name AS agent_name FROM agent_messages m "
            "LEFT JOIN agents a ON m.agent_id = a.id"
        )
        params: list = []
        if agent_id is not None:
            params.append(agent_id)
            query += f" WHERE m.agent_id = ${len(params)}"
        params.append(int(limit))
        query += f" ORDER BY m.created_at DESC, m.id DESC LIMIT ${len(params)}"

        result = await self._db.execute(query, params)
        return [AgentMessage(**row) for row in result.rows]

    async def create_message(self, message: str | None, agent_id: int | None = None) -> AgentMessage:
        """创建消息

        Raises:
            MissingFieldError: message 缺失或为空
        """
        if not message or not message.strip():
            raise MissingFieldError("message")

        result = await self._db.execute(
            """
            INSERT INTO agent_messages (agent_id, message)
            VALUES ($1, $2)
            RETURNING *
            """,
            [agent_id, message],
        )
        row = result.rows[0]
        agent_name = None
        if agent_id is not None:
            names = await self._db.execute("SELECT name FROM agents WHERE id = $1", [agent_id])
            agent_name = names.rows[0]["name"] if names.rows else None
        return AgentMessage(**row, agent_name=agent_name)
