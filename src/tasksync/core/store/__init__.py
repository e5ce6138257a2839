"""TaskSync Core Store -- 内存存储实现"""

from .protocols import EventPublisher, TaskStore
from .task_store import InMemoryTaskStore

__all__ = [
    "TaskStore",
    "EventPublisher",
    "InMemoryTaskStore",
]
