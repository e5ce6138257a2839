"""gateway 测试配置 -- FastAPI app + httpx AsyncClient fixture"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sse_starlette.sse import AppStatus


@pytest.fixture(autouse=True)
def _reset_sse_exit_event(monkeypatch):
    """sse-starlette 的退出事件在类属性上惰性创建，每个测试的事件循环需要新的实例"""
    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)


@pytest_asyncio.fixture
async def test_app(monkeypatch, local_bus, task_store, registry, relay):
    """创建测试用 FastAPI app，手动初始化 lifespan 状态"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from tasksync.gateway.main import create_app

    app = create_app()
    app.state.event_bus = local_bus
    app.state.task_store = task_store
    app.state.connection_registry = registry
    app.state.broadcast_relay = relay
    return app


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac
