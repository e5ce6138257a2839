"""TaskSync 异常体系

InvalidInputError / TaskNotFoundError 由 Task Store 抛出，网关翻译为 400 / 404；
DeliveryFailure 只在广播中继内部流转，转化为连接注销；
BusConnectionError 在启动阶段致命，运行期记录日志并重试。
"""


class TaskSyncError(Exception):
    """TaskSync 基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可在不中断进程的前提下恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class InvalidInputError(TaskSyncError):
    """必填字段缺失或为空，操作未执行"""

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"{field} 为必填字段", recoverable=True)
        self.field = field


class TaskNotFoundError(TaskSyncError):
    """任务不存在，操作未执行"""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with id {task_id} does not exist", recoverable=True)
        self.task_id = task_id


class DeliveryFailure(TaskSyncError):
    """单个推送连接写入失败（对端已断开或发送缓冲已满）

    只影响该连接本身：中继捕获后注销连接，不向发布方或其他连接传播。
    """

    def __init__(self, connection_id: int, reason: str) -> None:
        super().__init__(
            f"推送连接 {connection_id} 写入失败: {reason}",
            recoverable=True,
        )
        self.connection_id = connection_id
        self.reason = reason


class BusConnectionError(TaskSyncError):
    """Event Bus 不可达（连接失败、超时、连接中断等）"""

    def __init__(self, bus_url: str, original_error: Exception) -> None:
        """
        Args:
            bus_url: 尝试连接的 Event Bus 地址
            original_error: 原始异常
        """
        super().__init__(
            f"Event Bus 不可达: {bus_url} -- {original_error}",
            recoverable=False,
        )
        self.bus_url = bus_url
        self.original_error = original_error
