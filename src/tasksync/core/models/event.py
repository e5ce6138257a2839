"""ChangeEvent Domain Model

事件不可变、不落盘，携带事件发生时 Task 的完整副本（而非 diff）。
同一 Store 实例内事件按发布顺序全序。
"""

from pydantic import BaseModel, ConfigDict, Field

from .enums import ChangeEventType
from .task import Task


class ChangeEvent(BaseModel):
    """变更事件 -- Event Bus 与 SSE 上的统一载荷 {type, task}"""

    model_config = ConfigDict(frozen=True)

    type: ChangeEventType = Field(description="事件类型")
    task: Task = Field(description="事件发生时的 Task 副本")

    @classmethod
    def created(cls, task: Task) -> "ChangeEvent":
        return cls(type=ChangeEventType.TASK_CREATED, task=task.model_copy())

    @classmethod
    def updated(cls, task: Task) -> "ChangeEvent":
        return cls(type=ChangeEventType.TASK_UPDATED, task=task.model_copy())

    def to_json(self) -> str:
        """序列化为 Event Bus 消息 / SSE data 字符串"""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ChangeEvent":
        """从 Event Bus 消息反序列化

        Raises:
            pydantic.ValidationError: 消息格式不合法
        """
        return cls.model_validate_json(raw)
