# tests/handlers/test_error_handler.py
import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from webseed_torznab.handlers.error_handler import (
    global_error_handler,
    http_error_handler,
)


@pytest.fixture
def failing_app() -> FastAPI:
    app = FastAPI()
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, global_error_handler)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    @app.get("/teapot")
    async def teapot():
        raise HTTPException(status_code=418, detail="I'm a teapot")

    return app


def test_global_error_handler_logs_and_hides_details(failing_app, mocker):
    logger_mock = mocker.patch("webseed_torznab.handlers.error_handler.logger.error")
    client = TestClient(failing_app, raise_server_exceptions=False)

    response = client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["status"] == "error"
    assert "An unexpected error occurred" in body["message"]
    assert "hunter2" not in response.text
    logger_mock.assert_called_once()
    args, kwargs = logger_mock.call_args
    assert "GET /boom" in args[0]
    assert isinstance(kwargs["exc_info"], RuntimeError)


def test_http_error_handler_uses_json_shape(failing_app):
    response = TestClient(failing_app).get("/teapot")

    assert response.status_code == 418
    assert response.json() == {"status": "error", "message": "I'm a teapot"}


def test_app_routes_unhandled_errors_through_global_handler(make_client, mocker):
    mocker.patch(
        "webseed_torznab.services.catalog.Catalog.search",
        side_effect=RuntimeError("boom"),
    )
    logger_mock = mocker.patch("webseed_torznab.handlers.error_handler.logger.error")
    client = make_client(raise_server_exceptions=False)

    response = client.get("/api/torrents")

    assert response.status_code == 500
    assert response.json()["status"] == "error"
    logger_mock.assert_called_once()
