"""Agent 与消息路由

GET  /api/agents             Agent 列表（创建顺序）
POST /api/agents             创建 Agent
PUT  /api/agents/{agent_id}  部分更新 Agent
GET  /api/messages           消息列表（agent_id 筛选 + limit）
POST /api/messages           创建消息
"""

from clawcontrol.core.config import MESSAGE_LIST_LIMIT
from clawcontrol.core.exceptions import MissingFieldError, RecordNotFoundError
from clawcontrol.core.models import Agent, AgentMessage
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..deps import get_sse_hub, get_store_group
from ..errors import error_response, not_found_response
from ..services.agent_service import AgentService

router = APIRouter()


class AgentCreateRequest(BaseModel):
    """创建 Agent 请求体"""

    name: str | None = Field(default=None, description="名称")
    description: str | None = Field(default=None, description="描述")
    role: str = Field(default="Agent", description="角色")
    status: str = Field(default="idle", description="运行状态")
    avatar: str | None = Field(default=None, description="头像 emoji")


class AgentUpdateRequest(BaseModel):
    """部分更新请求体，省略的字段保持原值"""

    name: str | None = None
    description: str | None = None
    role: str | None = None
    status: str | None = None
    avatar: str | None = None


class MessageCreateRequest(BaseModel):
    """创建消息请求体"""

    message: str | None = Field(default=None, description="消息正文")
    agent_id: int | None = Field(default=None, description="发送 Agent")


@router.get("/api/agents", response_model=list[Agent])
async def list_agents(store_group=Depends(get_store_group)):
    return await AgentService(store_group).list_agents()


@router.post("/api/agents", status_code=201, response_model=Agent)
async def create_agent(
    body: AgentCreateRequest,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    service = AgentService(store_group, sse_hub)
    try:
        return await service.create_agent(**body.model_dump())
    except MissingFieldError as e:
        return error_response(400, "VALIDATION_ERROR", str(e))


@router.put("/api/agents/{agent_id}", response_model=Agent)
async def update_agent(
    agent_id: int,
    body: AgentUpdateRequest,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    service = AgentService(store_group, sse_hub)
    try:
        return await service.update_agent(agent_id, **body.model_dump())
    except RecordNotFoundError as e:
        return not_found_response(e)


@router.get("/api/messages", response_model=list[AgentMessage])
async def list_messages(
    agent_id: int | None = Query(default=None, description="按 Agent 筛选"),
    limit: int = Query(default=MESSAGE_LIST_LIMIT, ge=1, le=1000, description="返回条数"),
    store_group=Depends(get_store_group),
):
    """查询消息列表，按 created_at 倒序"""
    return await AgentService(store_group).list_messages(agent_id=agent_id, limit=limit)


@router.post("/api/messages", status_code=201, response_model=AgentMessage)
async def create_message(
    body: MessageCreateRequest,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    service = AgentService(store_group, sse_hub)
    try:
        return await service.create_message(body.message, agent_id=body.agent_id)
    except MissingFieldError as e:
        return error_response(400, "VALIDATION_ERROR", str(e))
