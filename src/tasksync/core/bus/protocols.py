"""EventBus Protocol 接口定义

发布侧在每次 Store 变更成功后同步调用 publish；
订阅侧在进程生命周期内只有一个消费者（BroadcastRelay）调用 listen。
"""

from collections.abc import AsyncIterator
from typing import Protocol

from ..models.event import ChangeEvent


class EventBus(Protocol):
    """Event Bus 接口"""

    async def connect(self) -> None:
        """建立发布与订阅连接

        Raises:
            BusConnectionError: 无法建立连接（启动阶段致命）
        """
        ...

    async def publish(self, event: ChangeEvent) -> None:
        """序列化并发布变更事件

        Raises:
            BusConnectionError: 发布失败
        """
        ...

    def listen(self) -> AsyncIterator[ChangeEvent]:
        """按接收顺序逐条产出反序列化后的变更事件"""
        ...

    async def ping(self) -> bool:
        """Bus 连通性检查"""
        ...

    async def close(self) -> None:
        """关闭全部连接"""
        ...
