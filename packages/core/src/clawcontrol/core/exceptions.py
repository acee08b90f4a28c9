"""Claw Control 异常体系

校验错误 / 记录不存在 / 状态机异常 / 存储错误，由 gateway 层映射为 HTTP 响应。
"""


class ClawControlError(Exception):
    """基础异常"""


class MissingFieldError(ClawControlError):
    """必填字段缺失或为空（在访问存储之前拒绝）"""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required")
        self.field = field


class RecordNotFoundError(ClawControlError):
    """更新/删除目标不存在"""

    def __init__(self, entity: str, record_id: int) -> None:
        super().__init__(f"{entity.capitalize()} with id {record_id} does not exist")
        self.entity = entity
        self.record_id = record_id


class InvalidStatusError(ClawControlError):
    """任务状态不在枚举范围内（数据完整性异常）"""

    def __init__(self, status: object) -> None:
        super().__init__(f"Unknown task status: {status!r}")
        self.status = status


class TaskAlreadyCompletedError(ClawControlError):
    """任务已处于终态，无法继续推进"""

    def __init__(self, task) -> None:
        super().__init__("Task already completed")
        self.task = task


class StorageError(ClawControlError):
    """存储引擎错误 -- 保留引擎原始错误信息，不重试"""


class TagDecodeError(StorageError):
    """tags 列无法解码（仅在严格模式下抛出）"""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Malformed tags value: {raw[:80]!r}")
        self.raw = raw
