"""AgentStore -- agents 表的领域操作

name 为配置重载的自然键，upsert 依赖 idx_agents_name 唯一索引。
"""

from ..exceptions import MissingFieldError, RecordNotFoundError
from ..models.agent import DEFAULT_AGENT_ROLE, DEFAULT_AGENT_STATUS, Agent, AgentDefinition
from .adapter import StorageAdapter


class AgentStore:
    """Agent 存储"""

    def __init__(self, adapter: StorageAdapter) -> None:
        self._db = adapter

    async def list_agents(self) -> list[Agent]:
        """查询全部 Agent，按创建顺序"""
        result = await self._db.execute("SELECT * FROM agents ORDER BY created_at, id")
        return [Agent(**row) for row in result.rows]

    async def get_agent(self, agent_id: int) -> Agent | None:
        result = await self._db.execute("SELECT * FROM agents WHERE id = $1", [agent_id])
        if not result.rows:
            return None
        return Agent(**result.rows[0])

    async def list_agent_names(self) -> set[str]:
        result = await self._db.execute("SELECT name FROM agents")
        return {row["name"] for row in result.rows}

    async def count_agents(self, status: str | None = None) -> int:
        """统计 Agent 数量，可按 status 等值筛选"""
        if status is None:
            result = await self._db.execute("SELECT COUNT(*) AS count FROM agents")
        else:
            result = await self._db.execute(
                "SELECT COUNT(*) AS count FROM agents WHERE status = $1",
                [status],
            )
        return int(result.rows[0]["count"])

    async def create_agent(
        self,
        name: str | None,
        description: str | None = None,
        role: str | None = None,
        status: str | None = None,
        avatar: str | None = None,
    ) -> Agent:
        """创建 Agent

        Raises:
            MissingFieldError: name 缺失或为空
        """
        if not name or not name.strip():
            raise MissingFieldError("name")

        columns = ["name", "description", "role", "status"]
        params = [
            name,
            description or None,
            role or DEFAULT_AGENT_ROLE,
            status or DEFAULT_AGENT_STATUS,
        ]
        # 未指定 avatar 时使用列默认值
        if avatar:
            columns.append("avatar")
            params.append(avatar)

        placeholders = ", ".join(f"${i}" for i in range(1, len(params) + 1))
        result = await self._db.execute(
            f"INSERT INTO agents ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *",
            params,
        )
        return Agent(**result.rows[0])

    async def update_agent(
        self,
        agent_id: int,
        name: str | None = None,
        description: str | None = None,
        role: str | None = None,
        status: str | None = None,
        avatar: str | None = None,
    ) -> Agent:
        """部分更新 Agent，None 字段保持原值

        Raises:
            RecordNotFoundError: Agent 不存在
        """
        result = await self._db.execute(
            """
            UPDATE agents
            SET name = COALESCE($1, name),
                description = COALESCE($2, description),
                role = COALESCE($3, role),
                status = COALESCE($4, status),
                avatar = COALESCE($5, avatar)
            WHERE id = $6
            RETURNING *
            """,
            [name, description, role, status, avatar, agent_id],
        )
        if not result.rows:
            raise RecordNotFoundError("agent", agent_id)
        return Agent(**result.rows[0])

    async def upsert_agent(self, definition: AgentDefinition) -> Agent:
        """按 name 插入或更新 description/role/avatar（status 保留运行时值）"""
        result = await self._db.execute(
            """
            INSERT INTO agents (name, description, role, avatar, status)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (name) DO UPDATE SET
                description = EXCLUDED.description,
                role = EXCLUDED.role,
                avatar = EXCLUDED.avatar
            RETURNING *
            """,
            [
                definition.name,
                definition.description,
                definition.role,
                definition.avatar,
                definition.status,
            ],
        )
        return Agent(**result.rows[0])

    async def delete_all_agents(self) -> int:
        """清空 agents 表，返回删除行数（任务/消息的 agent_id 置空）"""
        result = await self._db.execute("DELETE FROM agents")
        return result.affected_count
