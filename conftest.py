"""全局 pytest 配置 -- 进程内 Event Bus + Store + 广播链路 fixture"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from tasksync.core.bus import LocalEventBus
from tasksync.core.store import InMemoryTaskStore
from tasksync.gateway.services.broadcast_relay import BroadcastRelay
from tasksync.gateway.services.connection_registry import ConnectionRegistry


@pytest_asyncio.fixture
async def local_bus() -> AsyncGenerator[LocalEventBus, None]:
    """已连接的进程内 Event Bus"""
    bus = LocalEventBus()
    await bus.connect()
    yield bus
    await bus.close()


@pytest_asyncio.fixture
async def task_store(local_bus: LocalEventBus) -> InMemoryTaskStore:
    """发布到 local_bus 的 Task Store"""
    return InMemoryTaskStore(publisher=local_bus)


@pytest_asyncio.fixture
async def registry() -> ConnectionRegistry:
    """空的连接注册表"""
    return ConnectionRegistry()


@pytest_asyncio.fixture
async def relay(
    registry: ConnectionRegistry, local_bus: LocalEventBus
) -> AsyncGenerator[BroadcastRelay, None]:
    """已启动的广播中继（订阅 local_bus）"""
    broadcast_relay = BroadcastRelay(registry, local_bus)
    broadcast_relay.start()
    yield broadcast_relay
    await broadcast_relay.stop()
