"""任务路由 -- 快照查询与变更

GET /tasks: 全量任务快照，按创建顺序。
POST /tasks: 创建任务，成功后经 Event Bus 广播 TASK_CREATED。
PATCH /tasks/{task_id}: 更新任务状态，成功后广播 TASK_UPDATED。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse
from tasksync.core.exceptions import InvalidInputError, TaskNotFoundError

from ..deps import get_task_store

router = APIRouter()


class TaskCreateRequest(BaseModel):
    """创建任务请求体

    title 缺失与空字符串同样由 Store 校验并返回 400。
    """

    title: str | None = Field(default=None, description="任务标题")
    status: str | None = Field(default=None, description="初始状态，缺省为 TODO")


class TaskStatusUpdateRequest(BaseModel):
    """更新状态请求体"""

    status: str | None = Field(default=None, description="新状态")


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


@router.get("/tasks")
async def list_tasks(store=Depends(get_task_store)):
    """全量任务快照"""
    tasks = await store.list_tasks()
    return [task.to_wire() for task in tasks]


@router.post("/tasks", status_code=201)
async def create_task(body: TaskCreateRequest, store=Depends(get_task_store)):
    """创建任务

    - 成功返回 201 + Task
    - title 缺失或为空返回 400，不产生事件
    """
    try:
        task = await store.create_task(body.title, body.status)
    except InvalidInputError as e:
        return _error_response(400, "INVALID_INPUT", str(e))

    return JSONResponse(status_code=201, content=task.to_wire())


@router.patch("/tasks/{task_id}")
async def update_task_status(
    task_id: int,
    body: TaskStatusUpdateRequest,
    store=Depends(get_task_store),
):
    """更新任务状态

    - 成功返回 200 + Task
    - 任务不存在返回 404
    - status 缺失或为空返回 400
    """
    try:
        task = await store.update_task_status(task_id, body.status)
    except TaskNotFoundError as e:
        return _error_response(404, "TASK_NOT_FOUND", str(e))
    except InvalidInputError as e:
        return _error_response(400, "INVALID_INPUT", str(e))

    return task.to_wire()
