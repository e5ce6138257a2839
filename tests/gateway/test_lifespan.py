"""FastAPI lifespan 测试

测试内容：
1. memory 模式启动：组件初始化、中继运行，关闭时清理
2. Event Bus 不可达时启动失败
"""

import pytest
from fastapi import FastAPI
from tasksync.core.exceptions import BusConnectionError
from tasksync.gateway import main as gateway_main
from tasksync.gateway.services.connection_registry import PushConnection


class UnreachableBus:
    url = "redis://unreachable:6379"

    async def connect(self) -> None:
        raise BusConnectionError(self.url, ConnectionRefusedError("refused"))


class TestLifespan:
    async def test_startup_and_shutdown_in_memory_mode(self, monkeypatch):
        monkeypatch.setenv("TASKSYNC_BUS_MODE", "memory")
        app = FastAPI()

        async with gateway_main.lifespan(app):
            assert app.state.broadcast_relay.is_running
            assert await app.state.event_bus.ping() is True

            connection = PushConnection()
            await app.state.connection_registry.register(connection)
            task = await app.state.task_store.create_task("Buy milk")
            assert task.id == 1

            frame = await connection.read(timeout=2.0)
            assert '"TASK_CREATED"' in frame["data"]

        assert app.state.broadcast_relay.is_running is False
        assert await app.state.event_bus.ping() is False
        assert connection.closed

    async def test_bus_unreachable_aborts_startup(self, monkeypatch):
        monkeypatch.setattr(gateway_main, "create_event_bus", lambda config: UnreachableBus())
        app = FastAPI()

        with pytest.raises(BusConnectionError):
            async with gateway_main.lifespan(app):
                pytest.fail("lifespan 不应在 Bus 不可达时进入服务阶段")

        assert not hasattr(app.state, "task_store")
