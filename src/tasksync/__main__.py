"""服务入口 -- python -m tasksync

在 TASKSYNC_HOST:TASKSYNC_PORT 上启动 uvicorn。
"""

import uvicorn

from tasksync.core.config import get_listen_host, get_listen_port


def main() -> None:
    """CLI 主入口"""
    uvicorn.run(
        "tasksync.gateway.main:app",
        host=get_listen_host(),
        port=get_listen_port(),
        # 日志由 structlog 统一接管
        log_config=None,
    )


if __name__ == "__main__":
    main()
