"""看板视图路由

GET /api/stats: 仪表盘统计（工作中的 Agent 数、排队中的任务数）
GET /api/board: 按状态分列的看板格式
"""

from clawcontrol.core.models import QUEUED_STATES, TaskStatus
from fastapi import APIRouter, Depends

from ..deps import get_store_group

router = APIRouter()

BOARD_COLUMNS: list[tuple[str, TaskStatus]] = [
    ("Backlog", TaskStatus.BACKLOG),
    ("To Do", TaskStatus.TODO),
    ("In Progress", TaskStatus.IN_PROGRESS),
    ("In Review", TaskStatus.REVIEW),
    ("Completed", TaskStatus.COMPLETED),
]


@router.get("/api/stats")
async def get_stats(store_group=Depends(get_store_group)):
    active_agents = await store_group.agent_store.count_agents(status="working")
    tasks_in_queue = await store_group.task_store.count_tasks(QUEUED_STATES)
    return {"activeAgents": active_agents, "tasksInQueue": tasks_in_queue}


@router.get("/api/board")
async def get_board(store_group=Depends(get_store_group)):
    """任务按状态分为五列，列内按创建时间正序"""
    tasks = await store_group.task_store.list_tasks()
    columns = {
        status: {"title": title, "status": status.value, "cards": []}
        for title, status in BOARD_COLUMNS
    }
    for task in reversed(tasks):
        columns[task.status]["cards"].append(
            {
                "id": task.id,
                "text": task.title,
                "description": task.description,
                "status": task.status.value,
                "agent_id": task.agent_id,
            }
        )
    return {"columns": list(columns.values())}
