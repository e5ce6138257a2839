"""配置常量模块 -- 可通过环境变量覆盖

包含监听地址、SSE 推送参数、前端静态文件目录等可配置常量。
Event Bus 连接配置见 tasksync.core.bus.config。
"""

import os
from pathlib import Path


def get_listen_host() -> str:
    """获取 HTTP 服务监听地址"""
    return os.environ.get("TASKSYNC_HOST", "0.0.0.0")


def get_listen_port() -> int:
    """获取 HTTP 服务监听端口"""
    return int(os.environ.get("TASKSYNC_PORT", "3000"))


def get_frontend_dir() -> Path:
    """获取前端静态文件目录（不存在时不挂载）"""
    return Path(os.environ.get("TASKSYNC_FRONTEND_DIR", "public"))


# SSE 断线重连间隔（毫秒），作为连接建立后的第一帧下发
SSE_RETRY_MS: int = int(os.environ.get("TASKSYNC_SSE_RETRY_MS", "10000"))

# SSE 心跳间隔（秒）
SSE_HEARTBEAT_INTERVAL: int = int(
    os.environ.get("TASKSYNC_SSE_HEARTBEAT_INTERVAL", "15")
)

# 单个推送连接的发送缓冲上限（帧数），写满视为投递失败
SSE_QUEUE_MAXSIZE: int = int(os.environ.get("TASKSYNC_SSE_QUEUE_MAXSIZE", "100"))
