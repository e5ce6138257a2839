"""TaskSync -- 共享任务列表实时同步服务"""

__version__ = "0.1.0"
