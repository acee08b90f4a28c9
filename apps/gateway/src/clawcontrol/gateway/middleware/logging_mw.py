"""LoggingMiddleware -- 请求级日志

为每个 HTTP 请求生成 request_id（ULID），绑定到 structlog contextvars。
SSE 响应在响应头发出时即返回，此时记录 stream_opened 而非 request_completed，
连接的结束由事件流自身记录（stream_closed）。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

EVENT_STREAM_MEDIA_TYPE = "text/event-stream"
_TRUTHY = {"1", "true", "yes", "on"}


def is_event_stream(response: Response) -> bool:
    return response.headers.get("content-type", "").startswith(EVENT_STREAM_MEDIA_TYPE)


class LoggingMiddleware(BaseHTTPMiddleware):
    """为每个请求生成 request_id，并在响应头 X-Request-ID 中返回"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        log = structlog.get_logger()
        await log.ainfo("request_started")

        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if is_event_stream(response):
            await log.ainfo(
                "stream_opened",
                demo=request.query_params.get("demo", "").lower() in _TRUTHY,
                setup_ms=elapsed_ms,
            )
        else:
            await log.ainfo(
                "request_completed",
                status_code=response.status_code,
                duration_ms=elapsed_ms,
            )

        response.headers["X-Request-ID"] = request_id
        return response
