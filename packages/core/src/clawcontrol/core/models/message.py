"""AgentMessage Domain Model

agent_messages 表的行模型。agent_name 来自 LEFT JOIN，仅用于展示。
"""

from datetime import datetime

from pydantic import BaseModel, Field


class AgentMessage(BaseModel):
    """Agent 消息"""

    id: int = Field(description="引擎分配的自增 ID")
    agent_id: int | None = Field(default=None, description="发送 Agent（弱引用）")
    message: str = Field(description="消息正文")
    created_at: datetime | None = Field(default=None, description="创建时间")
    agent_name: str | None = Field(default=None, description="Agent 名称（JOIN 得到）")
