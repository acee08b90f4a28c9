"""Task Domain Model

tasks 表的行模型。tags 始终为有序字符串列表（存储层负责解码）。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import TaskStatus


class Task(BaseModel):
    """Task 数据模型"""

    id: int = Field(description="引擎分配的自增 ID")
    title: str = Field(description="任务标题，非空")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.BACKLOG, description="当前状态")
    tags: list[str] = Field(default_factory=list, description="标签，保持插入顺序")
    agent_id: int | None = Field(default=None, description="负责的 Agent（弱引用）")
    created_at: datetime | None = Field(default=None, description="创建时间")
    updated_at: datetime | None = Field(default=None, description="更新时间")


class TaskProgress(BaseModel):
    """一次状态推进的结果"""

    previous_status: TaskStatus
    new_status: TaskStatus
    task: Task
