"""ConnectionRegistry -- 当前打开的推送连接集合

成员表由 asyncio.Lock 保护：register / unregister / snapshot 互斥，
snapshot 返回防御性副本，广播过程中的注册与注销不会影响正在进行的遍历。
"""

import asyncio
import itertools
from datetime import UTC, datetime

from tasksync.core.config import SSE_QUEUE_MAXSIZE
from tasksync.core.exceptions import DeliveryFailure

# 进程内连接 id，仅用于注册表记账
_connection_ids = itertools.count(1)


class PushConnection:
    """推送连接句柄 -- 有界发送队列，由 SSE 响应生成器消费

    写入是非阻塞的：连接已关闭或发送缓冲已满都视为投递失败。
    """

    def __init__(self, maxsize: int = SSE_QUEUE_MAXSIZE) -> None:
        self.connection_id = next(_connection_ids)
        self.connected_at = datetime.now(UTC)
        self._queue: asyncio.Queue[dict] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def write(self, frame: dict) -> None:
        """写入一帧 SSE 数据

        Raises:
            DeliveryFailure: 连接已关闭或发送缓冲已满
        """
        if self._closed:
            raise DeliveryFailure(self.connection_id, "connection closed")
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull as e:
            raise DeliveryFailure(self.connection_id, "send buffer full") from e

    async def read(self, timeout: float | None = None) -> dict:
        """读取下一帧

        Raises:
            TimeoutError: timeout 秒内没有新帧
        """
        return await asyncio.wait_for(self._queue.get(), timeout=timeout)

    def close(self) -> None:
        self._closed = True


class ConnectionRegistry:
    """推送连接注册表 -- 以 connection_id 作为注销句柄"""

    def __init__(self) -> None:
        self._connections: dict[int, PushConnection] = {}
        self._lock = asyncio.Lock()

    async def register(self, connection: PushConnection) -> int:
        """注册连接

        Returns:
            注销句柄
        """
        async with self._lock:
            self._connections[connection.connection_id] = connection
        return connection.connection_id

    async def unregister(self, handle: int) -> bool:
        """注销连接并关闭 -- 幂等

        显式关闭与写入失败都可能触发注销，重复调用是 no-op。

        Returns:
            True 表示本次调用移除了连接
        """
        async with self._lock:
            connection = self._connections.pop(handle, None)
        if connection is None:
            return False
        connection.close()
        return True

    async def snapshot(self) -> list[PushConnection]:
        """当前成员的时间点副本"""
        async with self._lock:
            return list(self._connections.values())

    async def close_all(self) -> int:
        """注销并关闭全部连接（应用关闭时调用）

        Returns:
            被关闭的连接数
        """
        async with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for connection in connections:
            connection.close()
        return len(connections)

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, handle: object) -> bool:
        return handle in self._connections
