"""LocalEventBus -- 进程内 Event Bus

memory 模式与测试使用：消息同样经过 JSON 序列化/反序列化，
保证与 Redis 模式的载荷格式一致。
"""

import asyncio
from collections.abc import AsyncIterator

import structlog
from pydantic import ValidationError

from ..exceptions import BusConnectionError
from ..models.event import ChangeEvent

log = structlog.get_logger()


class LocalEventBus:
    """基于 asyncio.Queue 的进程内 Event Bus"""

    url = "memory://local"

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._connected = False

    async def connect(self) -> None:
        self._connected = True
        log.info("bus_connected", url=self.url)

    async def publish(self, event: ChangeEvent) -> None:
        if not self._connected:
            raise BusConnectionError(self.url, RuntimeError("bus not connected"))
        self._queue.put_nowait(event.to_json())

    async def listen(self) -> AsyncIterator[ChangeEvent]:
        while True:
            raw = await self._queue.get()
            try:
                event = ChangeEvent.from_json(raw)
            except ValidationError as e:
                log.warning("bus_message_malformed", url=self.url, error=str(e))
                continue
            yield event

    async def ping(self) -> bool:
        return self._connected

    async def close(self) -> None:
        self._connected = False
        log.info("bus_closed", url=self.url)
