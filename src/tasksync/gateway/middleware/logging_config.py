"""日志初始化

TASKSYNC_LOG_FORMAT=json 输出单行 JSON（含 UTC 时间戳与异常堆栈），
其余取值输出彩色控制台格式。structlog 与标准库 logging 共用 root handler：
uvicorn、redis 客户端的日志也按同一格式渲染。
"""

import logging
import os

import structlog
from fastapi import FastAPI
from tasksync import __version__

# 自带 handler 的第三方 logger：去掉 handler，改由 root 统一输出
_FOREIGN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "redis")


def _pre_chain(json_mode: bool) -> list[structlog.types.Processor]:
    chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_mode:
        chain.append(structlog.processors.dict_tracebacks)
    return chain


def _adopt_foreign_loggers(level: int) -> None:
    for name in _FOREIGN_LOGGERS:
        foreign = logging.getLogger(name)
        foreign.handlers.clear()
        foreign.propagate = True
    # 访问日志由 LoggingMiddleware 记录（带 request_id）
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """配置 structlog 与 root logger，可重复调用

    参数缺省时读取 TASKSYNC_LOG_FORMAT（dev）与 TASKSYNC_LOG_LEVEL（INFO）。
    """
    json_mode = (log_format or os.environ.get("TASKSYNC_LOG_FORMAT", "dev")) == "json"
    level_name = (log_level or os.environ.get("TASKSYNC_LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

    pre_chain = _pre_chain(json_mode)
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if json_mode:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            ensure_ascii=False
        )
    else:
        renderer = structlog.dev.ConsoleRenderer()

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=pre_chain,
        )
    )
    logging.basicConfig(handlers=[handler], level=level, force=True)

    _adopt_foreign_loggers(level)


def setup_logfire(app: FastAPI) -> None:
    """LOGFIRE_SEND_TO_LOGFIRE=true 时接入 Logfire，追踪 HTTP 请求与 Redis 命令"""
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure(service_name="tasksync", service_version=__version__)
        logfire.instrument_fastapi(app)
        logfire.instrument_redis()
    except Exception:
        # Logfire 不可用时只保留本地日志
        structlog.get_logger().warning("logfire_init_failed", exc_info=True)
