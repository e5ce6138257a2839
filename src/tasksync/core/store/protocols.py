"""Store Protocol 接口定义

定义 TaskStore 与 EventPublisher 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from ..models.event import ChangeEvent
from ..models.task import Task


class EventPublisher(Protocol):
    """变更事件发布接口（Event Bus 发布侧）"""

    async def publish(self, event: ChangeEvent) -> None:
        """发布一条变更事件"""
        ...


class TaskStore(Protocol):
    """Task 存储接口"""

    async def list_tasks(self) -> list[Task]:
        """按创建顺序返回全部任务的时间点副本"""
        ...

    async def get_task(self, task_id: int) -> Task | None:
        """根据 id 查询任务"""
        ...

    async def create_task(self, title: str | None, status: str | None = None) -> Task:
        """创建任务并发布 TASK_CREATED 事件"""
        ...

    async def update_task_status(self, task_id: int, status: str | None) -> Task:
        """更新任务状态并发布 TASK_UPDATED 事件"""
        ...
