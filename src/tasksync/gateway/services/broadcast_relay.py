"""BroadcastRelay -- Event Bus 的唯一订阅者，向全部推送连接扇出事件

监听任务把 Bus 收到的事件放入 inbox 队列；
消费任务逐条取出并投递，同一时刻只投递一个事件，
因此每个连接收到事件的顺序与发布顺序一致。
单个连接写入失败只注销该连接，不重试，不影响其余连接。
"""

import asyncio
import contextlib

import structlog
from tasksync.core.bus import EventBus
from tasksync.core.exceptions import DeliveryFailure
from tasksync.core.models import ChangeEvent

from .connection_registry import ConnectionRegistry

log = structlog.get_logger()


class BroadcastRelay:
    """广播中继"""

    def __init__(self, registry: ConnectionRegistry, bus: EventBus | None = None) -> None:
        """
        Args:
            registry: 推送连接注册表
            bus: Event Bus；为 None 时只能通过 submit 投喂事件
        """
        self._registry = registry
        self._bus = bus
        self._inbox: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self._consumer_task: asyncio.Task | None = None
        self._listener_task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        if self._consumer_task is None or self._consumer_task.done():
            return False
        if self._bus is not None:
            return self._listener_task is not None and not self._listener_task.done()
        return True

    def submit(self, event: ChangeEvent) -> None:
        """把事件放入 inbox，等待消费任务投递"""
        self._inbox.put_nowait(event)

    async def deliver(self, event: ChangeEvent) -> int:
        """向注册表快照中的每个连接写入事件

        Returns:
            写入成功的连接数
        """
        frame = {"data": event.to_json()}
        delivered = 0

        for connection in await self._registry.snapshot():
            try:
                connection.write(frame)
            except DeliveryFailure as e:
                log.warning(
                    "delivery_failed",
                    connection_id=e.connection_id,
                    reason=e.reason,
                )
                await self._registry.unregister(connection.connection_id)
                continue
            delivered += 1

        log.info(
            "event_relayed",
            event_type=event.type.value,
            task_id=event.task.id,
            delivered=delivered,
        )
        return delivered

    async def join(self) -> None:
        """等待 inbox 中已有事件全部投递完成"""
        await self._inbox.join()

    async def _consume(self) -> None:
        while True:
            event = await self._inbox.get()
            try:
                await self.deliver(event)
            except Exception:
                log.exception("relay_delivery_error", event_type=event.type.value)
            finally:
                self._inbox.task_done()

    async def _listen(self) -> None:
        try:
            async for event in self._bus.listen():
                self.submit(event)
        except asyncio.CancelledError:
            raise
        except Exception:
            log.exception("relay_listener_crashed")
            raise

    def start(self) -> None:
        """启动消费任务与 Bus 监听任务"""
        if self._consumer_task is not None:
            return
        self._consumer_task = asyncio.create_task(
            self._consume(), name="broadcast-relay-consumer"
        )
        if self._bus is not None:
            self._listener_task = asyncio.create_task(
                self._listen(), name="broadcast-relay-listener"
            )
        log.info("relay_started", bus=self._bus is not None)

    async def stop(self) -> None:
        """停止后台任务（先停监听，再停消费）"""
        for task in (self._listener_task, self._consumer_task):
            if task is None:
                continue
            task.cancel()
            # 监听任务崩溃时异常已在任务内记录
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        self._listener_task = None
        self._consumer_task = None
        log.info("relay_stopped")
