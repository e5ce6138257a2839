"""枚举定义

TaskStatus 只约定前端使用的三个取值，Task Store 不做枚举校验：
任何非空字符串都是合法状态。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态（约定取值）"""

    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"


class ChangeEventType(StrEnum):
    """变更事件类型"""

    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
