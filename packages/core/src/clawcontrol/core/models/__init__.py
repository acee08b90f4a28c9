"""Claw Control Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .agent import (
    DEFAULT_AGENT_AVATAR,
    DEFAULT_AGENT_ROLE,
    DEFAULT_AGENT_STATUS,
    Agent,
    AgentDefinition,
)
from .enums import (
    QUEUED_STATES,
    STATUS_PROGRESSION,
    TERMINAL_STATES,
    TaskStatus,
    is_terminal,
    next_status,
)
from .message import AgentMessage
from .task import Task, TaskProgress

__all__ = [
    # 状态机
    "TaskStatus",
    "STATUS_PROGRESSION",
    "TERMINAL_STATES",
    "QUEUED_STATES",
    "next_status",
    "is_terminal",
    # Task
    "Task",
    "TaskProgress",
    # Agent
    "Agent",
    "AgentDefinition",
    "DEFAULT_AGENT_ROLE",
    "DEFAULT_AGENT_STATUS",
    "DEFAULT_AGENT_AVATAR",
    # Message
    "AgentMessage",
]
