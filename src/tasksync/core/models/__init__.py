"""TaskSync Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import ChangeEventType, TaskStatus
from .event import ChangeEvent
from .task import Task

__all__ = [
    # 枚举
    "TaskStatus",
    "ChangeEventType",
    # Task
    "Task",
    # Event
    "ChangeEvent",
]
