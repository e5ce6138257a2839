"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 Event Bus 连通性、广播中继状态、在线连接数。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证实时广播链路可用性

    检查项：
    1. event_bus: Bus 连通性（ping）
    2. relay: 广播中继后台任务是否在运行
    3. connections: 当前推送连接数（仅报告）
    """
    checks: dict = {}
    all_ok = True

    # 1. Event Bus 连通性
    event_bus = getattr(request.app.state, "event_bus", None)
    if event_bus is None:
        checks["event_bus"] = "error: not initialized"
        all_ok = False
    else:
        try:
            if await event_bus.ping():
                checks["event_bus"] = "ok"
            else:
                checks["event_bus"] = "unreachable"
                all_ok = False
        except Exception as e:
            log.warning("ready_check_error", check="event_bus", error=str(e))
            checks["event_bus"] = f"error: {e}"
            all_ok = False

    # 2. 广播中继
    relay = getattr(request.app.state, "broadcast_relay", None)
    if relay is not None and relay.is_running:
        checks["relay"] = "ok"
    else:
        checks["relay"] = "stopped"
        all_ok = False

    # 3. 推送连接数
    registry = getattr(request.app.state, "connection_registry", None)
    checks["connections"] = len(registry) if registry is not None else 0

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "checks": checks,
        },
    )
