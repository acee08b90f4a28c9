"""错误响应 -- 统一 {"error": {"code", "message"}} 结构

客户端错误（校验失败/不存在/已完成）在路由内转换；
存储错误由应用级异常处理器统一转换为 500，透传引擎原始信息。
"""

import structlog
from clawcontrol.core.exceptions import (
    ClawControlError,
    RecordNotFoundError,
    StorageError,
)
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()


def error_response(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    """构造错误响应"""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}, **extra},
    )


def not_found_response(exc: RecordNotFoundError) -> JSONResponse:
    return error_response(404, f"{exc.entity.upper()}_NOT_FOUND", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """注册存储层/领域层兜底异常处理器"""

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
        log.error("storage_error", error=str(exc), path=request.url.path)
        return error_response(500, "STORAGE_ERROR", str(exc))

    @app.exception_handler(ClawControlError)
    async def _domain_error(request: Request, exc: ClawControlError) -> JSONResponse:
        log.error("unhandled_domain_error", error=str(exc), error_type=type(exc).__name__)
        return error_response(500, "INTERNAL_ERROR", str(exc))
