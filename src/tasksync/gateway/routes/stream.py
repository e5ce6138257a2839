"""SSE 事件流路由

GET /events: 长连接推送全部任务变更事件。
响应开始后先下发 retry 指令并注册到 ConnectionRegistry，
之后逐帧推送 BroadcastRelay 写入的事件；空闲保活由 sse-starlette 的 ping 负责。
不回放历史事件，初始状态由 GET /tasks 获取。
"""

from collections.abc import AsyncIterator

import structlog
from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse, ServerSentEvent
from tasksync.core.config import SSE_HEARTBEAT_INTERVAL, SSE_QUEUE_MAXSIZE, SSE_RETRY_MS

from ..deps import get_connection_registry
from ..services.connection_registry import ConnectionRegistry, PushConnection

log = structlog.get_logger()

router = APIRouter()

# 检查连接是否已被中继注销的间隔（秒）
CLOSE_POLL_INTERVAL: float = 1.0


def _heartbeat() -> ServerSentEvent:
    return ServerSentEvent(comment="heartbeat", sep="\n")


async def event_stream(
    connection: PushConnection,
    registry: ConnectionRegistry,
    poll_interval: float = CLOSE_POLL_INTERVAL,
) -> AsyncIterator[dict]:
    """注册推送连接并逐帧产出

    注册放在生成器内：响应未开始（客户端已断开）时不会留下注册项；
    生成器关闭时在 finally 中注销。
    连接被中继注销（写入失败）后结束响应，由客户端按 retry 间隔重连。
    """
    try:
        connection.write({"retry": SSE_RETRY_MS})
        await registry.register(connection)
        log.info(
            "sse_client_connected",
            connection_id=connection.connection_id,
            connections=len(registry),
        )

        while not connection.closed:
            try:
                frame = await connection.read(timeout=poll_interval)
            except TimeoutError:
                continue
            yield frame
    finally:
        removed = await registry.unregister(connection.connection_id)
        log.info(
            "sse_client_disconnected",
            connection_id=connection.connection_id,
            removed=removed,
            connections=len(registry),
        )


def sse_response(
    connection: PushConnection,
    registry: ConnectionRegistry,
    poll_interval: float = CLOSE_POLL_INTERVAL,
) -> EventSourceResponse:
    """帧之间以单个 \\n 分隔：data: <json>\\n\\n"""
    return EventSourceResponse(
        event_stream(connection, registry, poll_interval),
        sep="\n",
        ping=SSE_HEARTBEAT_INTERVAL,
        ping_message_factory=_heartbeat,
    )


@router.get("/events")
async def stream_events(registry=Depends(get_connection_registry)):
    """SSE 事件流端点

    1. 写入 retry 指令
    2. 注册到 ConnectionRegistry
    3. 实时推送新事件，ping 保活
    """
    connection = PushConnection(maxsize=SSE_QUEUE_MAXSIZE)
    return sse_response(connection, registry)
