"""枚举定义 -- TaskStatus 状态机

包含 TaskStatus 枚举、STATUS_PROGRESSION 线性推进映射和 TERMINAL_STATES 终态集合。
"""

from enum import StrEnum

from ..exceptions import InvalidStatusError


class TaskStatus(StrEnum):
    """Task 状态机（看板五列）"""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"


# 线性推进：每个状态只有一个后继，终态后继为 None
STATUS_PROGRESSION: dict[TaskStatus, TaskStatus | None] = {
    TaskStatus.BACKLOG: TaskStatus.TODO,
    TaskStatus.TODO: TaskStatus.IN_PROGRESS,
    TaskStatus.IN_PROGRESS: TaskStatus.REVIEW,
    TaskStatus.REVIEW: TaskStatus.COMPLETED,
    TaskStatus.COMPLETED: None,
}

TERMINAL_STATES: set[TaskStatus] = {TaskStatus.COMPLETED}

# 排队中的状态（用于 stats 统计）
QUEUED_STATES: tuple[TaskStatus, ...] = (TaskStatus.BACKLOG, TaskStatus.TODO)


def next_status(status: str) -> TaskStatus | None:
    """返回下一个状态，终态返回 None

    Args:
        status: 当前状态（枚举值或其字符串）

    Returns:
        后继状态；已处于终态时返回 None

    Raises:
        InvalidStatusError: status 不在五个合法状态内
    """
    try:
        current = TaskStatus(status)
    except ValueError:
        raise InvalidStatusError(status) from None
    return STATUS_PROGRESSION[current]


def is_terminal(status: str) -> bool:
    """判断状态是否为终态"""
    return next_status(status) is None
