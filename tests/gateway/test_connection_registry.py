"""ConnectionRegistry / PushConnection 测试

测试内容：
1. 注册 / 注销 / 快照
2. 注销幂等
3. 快照是防御性副本
4. 连接关闭或缓冲写满时写入失败
"""

import asyncio

import pytest
from tasksync.core.exceptions import DeliveryFailure
from tasksync.gateway.services.connection_registry import (
    ConnectionRegistry,
    PushConnection,
)


class TestPushConnection:
    def test_connection_ids_are_unique(self):
        ids = {PushConnection().connection_id for _ in range(10)}
        assert len(ids) == 10

    async def test_write_then_read(self):
        connection = PushConnection()
        connection.write({"data": "1"})
        connection.write({"data": "2"})
        assert connection.pending == 2
        assert await connection.read(timeout=1.0) == {"data": "1"}
        assert await connection.read(timeout=1.0) == {"data": "2"}

    async def test_read_timeout(self):
        with pytest.raises(TimeoutError):
            await PushConnection().read(timeout=0.01)

    def test_write_after_close_fails(self):
        connection = PushConnection()
        connection.close()
        with pytest.raises(DeliveryFailure) as exc_info:
            connection.write({"data": "x"})
        assert exc_info.value.connection_id == connection.connection_id
        assert exc_info.value.reason == "connection closed"

    def test_write_to_full_buffer_fails(self):
        connection = PushConnection(maxsize=1)
        connection.write({"data": "1"})
        with pytest.raises(DeliveryFailure) as exc_info:
            connection.write({"data": "2"})
        assert exc_info.value.reason == "send buffer full"


class TestConnectionRegistry:
    async def test_register_returns_handle(self, registry: ConnectionRegistry):
        connection = PushConnection()
        handle = await registry.register(connection)
        assert handle == connection.connection_id
        assert handle in registry
        assert len(registry) == 1

    async def test_unregister_removes_and_closes(self, registry: ConnectionRegistry):
        connection = PushConnection()
        handle = await registry.register(connection)

        assert await registry.unregister(handle) is True
        assert handle not in registry
        assert connection.closed
        assert await registry.snapshot() == []

    async def test_unregister_is_idempotent(self, registry: ConnectionRegistry):
        handle = await registry.register(PushConnection())
        assert await registry.unregister(handle) is True
        assert await registry.unregister(handle) is False
        assert await registry.unregister(123456789) is False

    async def test_snapshot_is_a_copy(self, registry: ConnectionRegistry):
        first, second = PushConnection(), PushConnection()
        await registry.register(first)
        snapshot = await registry.snapshot()

        await registry.register(second)
        await registry.unregister(first.connection_id)

        assert snapshot == [first]
        assert await registry.snapshot() == [second]

    async def test_concurrent_register_unregister(self, registry: ConnectionRegistry):
        connections = [PushConnection() for _ in range(50)]
        await asyncio.gather(*(registry.register(c) for c in connections))
        await asyncio.gather(
            *(registry.unregister(c.connection_id) for c in connections[::2]),
            *(registry.snapshot() for _ in range(10)),
        )

        remaining = await registry.snapshot()
        assert remaining == connections[1::2]

    async def test_close_all(self, registry: ConnectionRegistry):
        connections = [PushConnection() for _ in range(3)]
        for connection in connections:
            await registry.register(connection)

        assert await registry.close_all() == 3
        assert len(registry) == 0
        assert all(c.closed for c in connections)
