"""日志与追踪中间件测试"""

import logging

import pytest
import structlog
from clawcontrol.gateway.middleware.logging_config import setup_logfire, setup_logging
from clawcontrol.gateway.middleware.logging_mw import LoggingMiddleware
from clawcontrol.gateway.middleware.trace_mw import extract_task_id
from fastapi import FastAPI
from fastapi.responses import StreamingResponse
from httpx import ASGITransport, AsyncClient
from structlog.testing import capture_logs


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/tasks/12", 12),
        ("/api/tasks/12/progress", 12),
        ("/api/tasks/7/complete", 7),
        ("/api/tasks", None),
        ("/api/tasks/abc", None),
        ("/api/agents/3", None),
    ],
)
def test_extract_task_id(path: str, expected):
    assert extract_task_id(path) == expected


def test_setup_logging_respects_level(monkeypatch):
    monkeypatch.setenv("CLAW_LOG_FORMAT", "json")
    monkeypatch.setenv("CLAW_LOG_LEVEL", "WARNING")
    setup_logging()
    assert logging.getLogger().level == logging.WARNING
    assert structlog.is_configured()


def test_logfire_disabled_by_default(monkeypatch):
    monkeypatch.delenv("LOGFIRE_SEND_TO_LOGFIRE", raising=False)
    assert setup_logfire() is False


async def test_request_binds_context(client: AsyncClient):
    task = (await client.post("/api/tasks", json={"title": "traced"})).json()
    resp = await client.post(f"/api/tasks/{task['id']}/progress")
    assert resp.status_code == 200
    assert "X-Request-ID" in resp.headers


def _middleware_app() -> FastAPI:
    application = FastAPI()
    application.add_middleware(LoggingMiddleware)

    @application.get("/plain")
    async def plain():
        return {"ok": True}

    @application.get("/events")
    async def events():
        async def body():
            yield "event: init\ndata: {}\n\n"

        return StreamingResponse(body(), media_type="text/event-stream")

    return application


class TestLoggingMiddleware:
    async def test_plain_request_logs_duration(self):
        transport = ASGITransport(app=_middleware_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            with capture_logs() as logs:
                resp = await ac.get("/plain")

        assert resp.status_code == 200
        completed = [e for e in logs if e["event"] == "request_completed"]
        assert completed[0]["status_code"] == 200
        assert completed[0]["duration_ms"] >= 0
        assert not any(e["event"] == "stream_opened" for e in logs)

    async def test_event_stream_logs_stream_opened(self):
        transport = ASGITransport(app=_middleware_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            with capture_logs() as logs:
                resp = await ac.get("/events", params={"demo": "true"})

        assert resp.headers["content-type"].startswith("text/event-stream")
        assert "X-Request-ID" in resp.headers
        opened = [e for e in logs if e["event"] == "stream_opened"]
        assert opened[0]["demo"] is True
        assert not any(e["event"] == "request_completed" for e in logs)
