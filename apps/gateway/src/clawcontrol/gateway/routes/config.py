"""Agent 配置路由

POST /api/config/reload: 按 agents.yaml 重载 Agent（force=true 时清空重建）
GET  /api/config/status: 当前生效的配置文件与搜索路径
"""

from clawcontrol.core.agents_config import find_config_path
from clawcontrol.core.config import get_agents_config_paths
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..deps import get_sse_hub, get_store_group
from ..services.agent_service import AgentService

router = APIRouter()


class ConfigReloadRequest(BaseModel):
    force: bool = Field(default=False, description="清空 agents 表后重建")


@router.post("/api/config/reload")
async def reload_config(
    body: ConfigReloadRequest | None = None,
    store_group=Depends(get_store_group),
    sse_hub=Depends(get_sse_hub),
):
    force = body.force if body else False
    service = AgentService(store_group, sse_hub)
    result, config_path = await service.reload_from_config(force=force)
    return {
        "success": True,
        "message": f"Reloaded agents from {config_path or 'built-in defaults'}",
        "configPath": config_path,
        "created": result.created,
        "skipped": result.skipped,
        "total": len(result.agents),
        "agents": [agent.model_dump(mode="json") for agent in result.agents],
    }


@router.get("/api/config/status")
async def config_status():
    config_path = find_config_path()
    return {
        "configPath": str(config_path) if config_path else None,
        "configFound": config_path is not None,
        "searchedPaths": [str(p) for p in get_agents_config_paths()],
    }
