"""FastAPI 应用主文件

app 创建 + lifespan 管理：存储初始化/关闭 + Agent 初始化 + SSEHub + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from clawcontrol.core.config import (
    get_database_url,
    get_sse_heartbeat_interval,
    get_sse_queue_maxsize,
    get_strict_tags,
)
from clawcontrol.core.seeding import seed_agents_from_config
from clawcontrol.core.store import create_store_group
from fastapi import FastAPI

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import agents, board, config, health, stream, tasks
from .services.sse_hub import SSEHub

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """启动时连接存储、执行迁移并初始化 Agent；关闭时断开所有订阅与连接"""
    store_group = await create_store_group(get_database_url(), strict_tags=get_strict_tags())
    app.state.store_group = store_group

    # Agent 初始化失败不阻塞启动
    await seed_agents_from_config(store_group.agent_store)

    app.state.sse_hub = SSEHub(
        heartbeat_interval=get_sse_heartbeat_interval(),
        queue_maxsize=get_sse_queue_maxsize(),
    )
    log.info("gateway_started", engine=store_group.adapter.engine)

    yield

    await app.state.sse_hub.close()
    await store_group.close()
    log.info("gateway_stopped")


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Claw Control Gateway",
        version="0.1.0",
        description="Claw Control 看板 API 与实时事件流",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire(app)

    register_exception_handlers(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(agents.router, tags=["agents"])
    app.include_router(board.router, tags=["board"])
    app.include_router(config.router, tags=["config"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
