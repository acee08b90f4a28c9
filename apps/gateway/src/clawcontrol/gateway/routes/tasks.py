"""任务路由

GET    /api/tasks                 任务列表，支持 status / agent_id 等值筛选
POST   /api/tasks                 创建任务
PUT    /api/tasks/{task_id}       部分更新任务
DELETE /api/tasks/{task_id}       删除任务
POST   /api/tasks/{task_id}/progress  推进到下一个状态
POST   /api/tasks/{task_id}/complete  直接置为 completed
"""

from clawcontrol.core.exceptions import (
    MissingFieldError,
    RecordNotFoundError,
    TaskAlreadyCompletedError,
)
from clawcontrol.core.models import Task, TaskStatus
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..deps import get_sse_hub, get_store_group
from ..errors import error_response, not_found_response
from ..services.task_service import TaskService

router = APIRouter()


class TaskCreateRequest(BaseModel):
    """创建任务请求体（title 缺失由服务层返回 400）"""

    title: str | None = Field(default=None, description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.BACKLOG, description="初始状态")
    tags: list[str] = Field(default_factory=list, description="标签")
    agent_id: int | None = Field(default=None, description="负责的 Agent")


class TaskUpdateRequest(BaseModel):
    """部分更新请求体，省略的字段保持原值"""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    tags: list[str] | None = None
    agent_id: int | None = None


class TaskDeleteResponse(BaseModel):
    success: bool
    deleted: Task


class TaskProgressResponse(BaseModel):
    success: bool
    previousStatus: TaskStatus
    newStatus: TaskStatus
    task: Task


class TaskCompleteResponse(BaseModel):
    success: bool
    task: Task


@router.get("/api/tasks", response_model=list[Task])
async def list_tasks(
    status: str | None = Query(default=None, description="按状态筛选"),
    agent_id: int | None = Query(default=None, description="按 Agent 筛选"),
    store_group=Depends(get_store_group),
):
    """查询任务列表，按 created_at 倒序"""
    service = TaskService(store_group)
    return await service.list_tasks(status=status, agent_id=agent_id)


@router.post("/api/tasks", status_code=201, response_model=Task)
async def create_task(
    body: TaskCreateRequest,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    service = TaskService(store_group, sse_hub)
    try:
        return await service.create_task(**body.model_dump())
    except MissingFieldError as e:
        return error_response(400, "VALIDATION_ERROR", str(e))


@router.put("/api/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: int,
    body: TaskUpdateRequest,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    service = TaskService(store_group, sse_hub)
    try:
        return await service.update_task(task_id, **body.model_dump())
    except RecordNotFoundError as e:
        return not_found_response(e)


@router.delete("/api/tasks/{task_id}", response_model=TaskDeleteResponse)
async def delete_task(
    task_id: int,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    service = TaskService(store_group, sse_hub)
    try:
        task = await service.delete_task(task_id)
    except RecordNotFoundError as e:
        return not_found_response(e)
    return TaskDeleteResponse(success=True, deleted=task)


@router.post("/api/tasks/{task_id}/progress", response_model=TaskProgressResponse)
async def progress_task(
    task_id: int,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    """推进到下一个状态

    - 200: 推进成功
    - 400: 任务已完成（任务保持不变）
    - 404: 任务不存在
    """
    service = TaskService(store_group, sse_hub)
    try:
        progress = await service.advance_task(task_id)
    except RecordNotFoundError as e:
        return not_found_response(e)
    except TaskAlreadyCompletedError as e:
        return error_response(
            400,
            "TASK_ALREADY_COMPLETED",
            str(e),
            task=e.task.model_dump(mode="json"),
        )

    return TaskProgressResponse(
        success=True,
        previousStatus=progress.previous_status,
        newStatus=progress.new_status,
        task=progress.task,
    )


@router.post("/api/tasks/{task_id}/complete", response_model=TaskCompleteResponse)
async def complete_task(
    task_id: int,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    service = TaskService(store_group, sse_hub)
    try:
        task = await service.complete_task(task_id)
    except RecordNotFoundError as e:
        return not_found_response(e)
    return TaskCompleteResponse(success=True, task=task)
