"""Task Domain Model

Task 由 Task Store 独占持有，对外只暴露副本。
创建后仅 status 可变。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import TaskStatus


class Task(BaseModel):
    """Task 数据模型

    JSON 线上格式沿用前端字段名：id / title / status / createdAt。
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="唯一标识，从 1 开始单调递增，不复用")
    title: str = Field(description="任务标题，去除空白后非空")
    status: str = Field(default=TaskStatus.TODO.value, description="当前状态")
    created_at: datetime = Field(alias="createdAt", description="创建时间（UTC）")

    def to_wire(self) -> dict:
        """序列化为线上 JSON 结构"""
        return self.model_dump(mode="json", by_alias=True)
