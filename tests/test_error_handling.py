from __future__ import annotations

import logging

import pytest
from fastapi import status
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from taskboard.core.logging import RequestContextFilter
from taskboard.errors import ApplicationError, FetchError, UpdateError
from taskboard.main import create_app

pytestmark = pytest.mark.asyncio


@pytest.fixture()
def app():
    return create_app()


def _client(app) -> AsyncClient:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return AsyncClient(transport=transport, base_url="http://test")


async def test_application_error_response_schema(app) -> None:
    @app.get("/error/application")
    async def trigger_application_error() -> None:  # pragma: no cover - defined in test
        raise ApplicationError(
            "Example failure",
            code="example_error",
            status_code=status.HTTP_418_IM_A_TEAPOT,
            details={"foo": "bar"},
        )

    async with _client(app) as client:
        response = await client.get("/error/application")

    assert response.status_code == status.HTTP_418_IM_A_TEAPOT
    request_id = response.headers["X-Request-ID"]
    assert response.json() == {
        "code": "example_error",
        "message": "Example failure",
        "details": {"foo": "bar", "request_id": request_id},
    }


async def test_update_error_is_service_unavailable(app) -> None:
    @app.post("/error/update")
    async def trigger_update_error() -> None:  # pragma: no cover - defined in test
        raise UpdateError(details={"task_id": 1, "part_id": 2})

    async with _client(app) as client:
        response = await client.post("/error/update")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    payload = response.json()
    assert payload["code"] == "update_error"
    assert payload["details"]["part_id"] == 2


async def test_store_failures_are_logged_with_their_outcome(app, caplog) -> None:
    @app.get("/error/fetch")
    async def trigger_fetch_error() -> None:  # pragma: no cover - defined in test
        raise FetchError(details={"department": "Designers"})

    @app.post("/error/abandon")
    async def trigger_update_error() -> None:  # pragma: no cover - defined in test
        raise UpdateError(details={"part_id": 2})

    with caplog.at_level(logging.WARNING, logger="taskboard.errors"):
        async with _client(app) as client:
            fetch = await client.get("/error/fetch")
            abandon = await client.post("/error/abandon")

    assert fetch.json()["code"] == "fetch_error"
    assert abandon.json()["code"] == "update_error"
    outcomes = {record.code: record.outcome for record in caplog.records if record.name == "taskboard.errors"}
    assert outcomes == {"fetch_error": "load_failed", "update_error": "change_abandoned"}
    assert all(record.levelno == logging.ERROR for record in caplog.records if record.name == "taskboard.errors")


async def test_validation_error_response_schema(app) -> None:
    class ExamplePayload(BaseModel):
        name: str

    @app.post("/error/validation")
    async def create_item(_: ExamplePayload) -> None:  # pragma: no cover - defined in test
        return None

    async with _client(app) as client:
        response = await client.post("/error/validation", json={})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["message"] == "Request validation failed."
    assert "errors" in payload["details"]
    assert payload["details"]["request_id"] == response.headers["X-Request-ID"]


async def test_not_found_error_response_schema(app) -> None:
    async with _client(app) as client:
        response = await client.get("/error/not-found")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    payload = response.json()
    assert payload["code"] == "not_found"
    assert payload["message"]
    assert payload["details"]["request_id"] == response.headers["X-Request-ID"]


async def test_unhandled_error_hides_internal_details(app) -> None:
    @app.get("/error/unhandled")
    async def trigger_unhandled_error() -> None:  # pragma: no cover - defined in test
        raise RuntimeError("Sensitive detail")

    async with _client(app) as client:
        response = await client.get("/error/unhandled")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    payload = response.json()
    assert payload["code"] == "server_error"
    assert payload["message"] == "Internal server error."
    assert "Sensitive" not in response.text


class _InMemoryHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.INFO)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


async def test_request_id_attached_to_logs(app) -> None:
    logger = logging.getLogger("taskboard.tests.error_handling")
    handler = _InMemoryHandler()
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)
    original_level = logger.level
    logger.setLevel(logging.INFO)

    @app.get("/log")
    async def emit_log() -> dict[str, str]:  # pragma: no cover - defined in test
        logger.info("Log entry")
        return {"status": "ok"}

    try:
        async with _client(app) as client:
            response = await client.get("/log")
    finally:
        logger.removeHandler(handler)
        logger.setLevel(original_level)
        handler.close()

    request_id = response.headers["X-Request-ID"]
    matching = [record for record in handler.records if record.getMessage() == "Log entry"]
    assert matching
    assert getattr(matching[0], "request_id", None) == request_id
