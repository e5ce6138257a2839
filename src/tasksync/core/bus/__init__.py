"""TaskSync Event Bus -- Store 与推送投递之间的发布/订阅通道"""

from .config import BusConfig, load_bus_config
from .local_bus import LocalEventBus
from .protocols import EventBus
from .redis_bus import RedisEventBus


def create_event_bus(config: BusConfig) -> EventBus:
    """按配置模式创建 Event Bus 实例（未连接）"""
    if config.mode == "memory":
        return LocalEventBus()
    return RedisEventBus(config)


__all__ = [
    "EventBus",
    "BusConfig",
    "load_bus_config",
    "create_event_bus",
    "RedisEventBus",
    "LocalEventBus",
]
