"""BusConfig -- Event Bus 配置加载

从环境变量加载配置，非法数值记录警告并回退默认值，不阻塞启动。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()


class BusConfig(BaseModel):
    """Event Bus 配置 -- 从环境变量加载

    环境变量:
        TASKSYNC_BUS_MODE: 运行模式（redis/memory）
        REDIS_HOST: Redis 主机（默认 127.0.0.1）
        REDIS_PORT: Redis 端口（默认 6379）
        TASKSYNC_BUS_CHANNEL: pub/sub 频道（默认 tasks_updates）
        TASKSYNC_BUS_RECONNECT_DELAY_S: 订阅断开后的重连间隔（秒，默认 1.0）
        TASKSYNC_BUS_SOCKET_TIMEOUT_S: Redis 套接字超时（秒，默认 5.0）
    """

    mode: Literal["redis", "memory"] = Field(
        default="redis",
        description="Event Bus 模式：redis / memory（进程内）",
    )
    host: str = Field(default="127.0.0.1", description="Redis 主机")
    port: int = Field(default=6379, ge=1, le=65535, description="Redis 端口")
    channel: str = Field(default="tasks_updates", description="pub/sub 频道名")
    reconnect_delay_s: float = Field(
        default=1.0,
        gt=0,
        description="订阅连接断开后的重连间隔（秒）",
    )
    socket_timeout_s: float = Field(
        default=5.0,
        gt=0,
        description="Redis 连接与命令超时（秒）",
    )

    @property
    def url(self) -> str:
        if self.mode == "memory":
            return "memory://local"
        return f"redis://{self.host}:{self.port}"


def _parse_float(env_var: str, fallback: float) -> float | None:
    val = os.environ.get(env_var)
    if not val:
        return None
    try:
        return float(val)
    except ValueError:
        log.warning("invalid_bus_config", env_var=env_var, value=val, fallback=fallback)
        return None


def load_bus_config() -> BusConfig:
    """从环境变量加载 Event Bus 配置

    Returns:
        BusConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("TASKSYNC_BUS_MODE"):
        kwargs["mode"] = val

    if val := os.environ.get("REDIS_HOST"):
        kwargs["host"] = val

    if val := os.environ.get("REDIS_PORT"):
        try:
            kwargs["port"] = int(val)
        except ValueError:
            log.warning(
                "invalid_bus_config",
                env_var="REDIS_PORT",
                value=val,
                fallback=6379,
            )

    if val := os.environ.get("TASKSYNC_BUS_CHANNEL"):
        kwargs["channel"] = val

    if (delay := _parse_float("TASKSYNC_BUS_RECONNECT_DELAY_S", 1.0)) is not None:
        kwargs["reconnect_delay_s"] = delay

    if (timeout := _parse_float("TASKSYNC_BUS_SOCKET_TIMEOUT_S", 5.0)) is not None:
        kwargs["socket_timeout_s"] = timeout

    return BusConfig(**kwargs)
