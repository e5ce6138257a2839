"""InMemoryTaskStore -- 进程内任务存储

任务集合与 next_id 计数器只在持锁的变更路径上修改：
分配 id、修改状态、发布事件三步对其他变更是原子的，
因此事件离开 Store 的顺序与变更顺序一致。
进程重启后状态丢失。
"""

import asyncio
from datetime import UTC, datetime

import structlog

from ..exceptions import BusConnectionError, InvalidInputError, TaskNotFoundError
from ..models import ChangeEvent, Task, TaskStatus
from .protocols import EventPublisher

log = structlog.get_logger()


class InMemoryTaskStore:
    """内存 Task 存储 -- 单写者，变更后同步发布变更事件"""

    def __init__(self, publisher: EventPublisher | None = None) -> None:
        # dict 保持插入顺序，即创建顺序
        self._tasks: dict[int, Task] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        self._publisher = publisher

    async def list_tasks(self) -> list[Task]:
        """返回全部任务的副本，按创建顺序"""
        return [task.model_copy() for task in self._tasks.values()]

    async def get_task(self, task_id: int) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy() if task is not None else None

    async def create_task(self, title: str | None, status: str | None = None) -> Task:
        """创建任务

        Args:
            title: 任务标题，去除首尾空白后不能为空（原样保存）
            status: 初始状态，缺省或为空时为 TODO

        Returns:
            已保存 Task 的副本

        Raises:
            InvalidInputError: title 缺失或为空
        """
        if title is None or not title.strip():
            raise InvalidInputError("title", "title 为必填字段")

        async with self._lock:
            task = Task(
                id=self._next_id,
                title=title,
                status=status or TaskStatus.TODO.value,
                created_at=datetime.now(UTC),
            )
            self._next_id += 1
            self._tasks[task.id] = task
            log.info("task_created", task_id=task.id, status=task.status)

            await self._emit(ChangeEvent.created(task))
            return task.model_copy()

    async def update_task_status(self, task_id: int, status: str | None) -> Task:
        """更新任务状态

        状态值不做枚举校验，任何非空字符串都会被接受。

        Raises:
            TaskNotFoundError: 任务不存在（优先于参数校验）
            InvalidInputError: status 缺失或为空
        """
        async with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            if not status:
                raise InvalidInputError("status", "status 为必填字段")

            previous = task.status
            task.status = status
            log.info(
                "task_status_updated",
                task_id=task_id,
                from_status=previous,
                to_status=status,
            )

            await self._emit(ChangeEvent.updated(task))
            return task.model_copy()

    async def _emit(self, event: ChangeEvent) -> None:
        """发布变更事件

        Event Bus 运行期不可达时变更已生效：记录错误，不回滚、不向调用方抛出，
        实时广播在 Bus 恢复前停滞。
        """
        if self._publisher is None:
            return
        try:
            await self._publisher.publish(event)
        except BusConnectionError as e:
            log.error(
                "event_publish_failed",
                event_type=event.type.value,
                task_id=event.task.id,
                error=str(e),
            )
