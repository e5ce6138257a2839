"""LoggingMiddleware

为每个 HTTP 请求生成 request_id，绑定到 structlog contextvars，
并记录请求耗时。SSE 请求在响应头发出时记录 request_completed（stream=True），
此时连接仍保持打开，断开由 sse_client_disconnected 记录。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

log = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件 -- request_id + 耗时"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        await log.ainfo("request_started")

        response = await call_next(request)

        is_stream = response.headers.get("content-type", "").startswith(
            "text/event-stream"
        )
        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            stream=is_stream,
        )

        response.headers["X-Request-ID"] = request_id
        return response
