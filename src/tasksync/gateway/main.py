"""FastAPI 应用主文件

app 创建 + lifespan 管理：Event Bus 连接 / Task Store / 连接注册表 / 广播中继
的初始化与关闭 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from tasksync.core.bus import create_event_bus, load_bus_config
from tasksync.core.config import get_frontend_dir
from tasksync.core.exceptions import BusConnectionError
from tasksync.core.store import InMemoryTaskStore

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, stream, tasks
from .services.broadcast_relay import BroadcastRelay
from .services.connection_registry import ConnectionRegistry

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理

    启动：Event Bus 发布/订阅连接建立失败时直接抛出，进程不对外服务。
    关闭：先停中继，再关闭全部推送连接与 Bus。
    """
    bus_config = load_bus_config()
    event_bus = create_event_bus(bus_config)
    try:
        await event_bus.connect()
    except BusConnectionError as e:
        log.critical("bus_connect_failed", url=e.bus_url, error=str(e.original_error))
        raise

    connection_registry = ConnectionRegistry()
    broadcast_relay = BroadcastRelay(connection_registry, event_bus)
    task_store = InMemoryTaskStore(publisher=event_bus)

    app.state.event_bus = event_bus
    app.state.connection_registry = connection_registry
    app.state.broadcast_relay = broadcast_relay
    app.state.task_store = task_store

    broadcast_relay.start()
    log.info("app_started", bus_mode=bus_config.mode, channel=bus_config.channel)

    yield

    await broadcast_relay.stop()
    closed = await connection_registry.close_all()
    await event_bus.close()
    log.info("app_stopped", closed_connections=closed)


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskSync Gateway",
        version="0.1.0",
        description="共享任务列表实时同步 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging，CORS 最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_logging()
    setup_logfire(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    # 前端静态文件在所有 API 路由之后挂载，确保 API 优先匹配
    frontend_dir = get_frontend_dir()
    if frontend_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(frontend_dir), html=True), name="frontend")

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
