"""依赖注入模块 -- 通过 FastAPI Depends 注入核心组件

组件实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from tasksync.core.bus import EventBus
from tasksync.core.store import InMemoryTaskStore

from .services.broadcast_relay import BroadcastRelay
from .services.connection_registry import ConnectionRegistry


def get_task_store(request: Request) -> InMemoryTaskStore:
    """从 app.state 获取 Task Store 实例"""
    return request.app.state.task_store


def get_connection_registry(request: Request) -> ConnectionRegistry:
    """从 app.state 获取连接注册表"""
    return request.app.state.connection_registry


def get_broadcast_relay(request: Request) -> BroadcastRelay:
    """从 app.state 获取广播中继"""
    return request.app.state.broadcast_relay


def get_event_bus(request: Request) -> EventBus:
    """从 app.state 获取 Event Bus"""
    return request.app.state.event_bus
