"""健康检查路由

GET /health: 数据库连通性检查，不可达时返回 503。
"""

import structlog
from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from ..deps import get_store_group

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health(store_group=Depends(get_store_group)):
    adapter = store_group.adapter
    try:
        await adapter.ping()
    except Exception as e:
        log.warning("health_check_failed", engine=adapter.engine, error=str(e))
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "database": "disconnected",
                "engine": adapter.engine,
                "error": str(e),
            },
        )
    return {"status": "healthy", "database": "connected", "engine": adapter.engine}
