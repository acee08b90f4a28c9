"""Agent Domain Model

agents 表的行模型，以及 agents.yaml 中的 Agent 定义。
name 作为配置重载的自然键（数据库层有唯一索引）。
"""

from datetime import datetime

from pydantic import BaseModel, Field

DEFAULT_AGENT_ROLE = "Agent"
DEFAULT_AGENT_STATUS = "idle"
DEFAULT_AGENT_AVATAR = "🤖"


class Agent(BaseModel):
    """Agent 数据模型"""

    id: int = Field(description="引擎分配的自增 ID")
    name: str = Field(description="名称（配置重载的自然键）")
    description: str | None = Field(default=None, description="描述")
    role: str = Field(default=DEFAULT_AGENT_ROLE, description="角色")
    avatar: str | None = Field(default=DEFAULT_AGENT_AVATAR, description="头像 emoji")
    status: str = Field(default=DEFAULT_AGENT_STATUS, description="运行状态（自由文本）")
    created_at: datetime | None = Field(default=None, description="创建时间")


class AgentDefinition(BaseModel):
    """agents.yaml 中的单个 Agent 定义"""

    name: str
    description: str | None = None
    role: str = DEFAULT_AGENT_ROLE
    avatar: str = DEFAULT_AGENT_AVATAR
    status: str = DEFAULT_AGENT_STATUS
