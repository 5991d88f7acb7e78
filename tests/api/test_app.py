# tests/api/test_app.py
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import APIRouter, FastAPI, status
from httpx import ASGITransport, AsyncClient

from avocado_api.core.database import MongoDbContext, mongo_manager
from avocado_api.main import app, lifespan, list_endpoints
from avocado_api.models.api_common import EndpointDescription

pytestmark = pytest.mark.asyncio


async def test_root_lists_routes(test_client: AsyncClient):
    response = await test_client.get("/")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "Welcome to the Avocado Sales API!"
    assert body["documentation"] == [
        {"path": "/", "methods": ["GET"]},
        {"path": "/avocadoSalesData", "methods": ["GET", "POST"]},
        {"path": "/avocadoSalesData/{record_id}", "methods": ["GET"]},
        {"path": "/healthcheck", "methods": ["GET"]},
    ]


async def test_list_endpoints_follows_nested_routers():
    inner = APIRouter(prefix="/inner")

    @inner.put("/{item_id}")
    async def replace_item(item_id: int):
        return {}

    outer = APIRouter(prefix="/outer")
    outer.include_router(inner)
    nested_app = FastAPI()
    nested_app.include_router(outer)

    assert list_endpoints(nested_app) == [EndpointDescription(path="/outer/inner/{item_id}", methods=["PUT"])]


async def test_lifespan_connects_and_always_disconnects(db_client, monkeypatch):
    connect = AsyncMock()
    disconnect = AsyncMock()
    monkeypatch.setattr(mongo_manager, "connect", connect)
    monkeypatch.setattr(mongo_manager, "disconnect", disconnect)
    monkeypatch.setattr(mongo_manager, "db", db_client)

    with pytest.raises(RuntimeError):
        async with lifespan(app):
            connect.assert_awaited_once()
            disconnect.assert_not_awaited()
            assert app.state.seed_task is None
            raise RuntimeError("server crashed")
    disconnect.assert_awaited_once()


async def test_database_context_manager_closes_client(monkeypatch):
    context = MongoDbContext()
    client = MagicMock()

    async def fake_connect(url=None, db_name=None):
        context.client = client
        context.db = MagicMock()

    monkeypatch.setattr(context, "connect", fake_connect)
    async with context as entered:
        assert entered is context
        assert context.db is not None
    client.close.assert_called_once()
    assert context.client is None and context.db is None


async def test_responses_carry_trace_id(test_client: AsyncClient):
    response = await test_client.get("/", headers={"X-Request-ID": "req_test123"})
    assert response.headers["X-Trace-ID"] == "req_test123"


async def test_unknown_route_uses_error_body(test_client: AsyncClient):
    response = await test_client.get("/avocados")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Not Found"}


async def test_database_unavailable_is_service_unavailable(monkeypatch):
    monkeypatch.setattr(mongo_manager, "db", None)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/avocadoSalesData")
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["error"].startswith("Database connection not available")


async def test_healthcheck_ok(test_client: AsyncClient, monkeypatch):
    fake_db = MagicMock()
    fake_db.command = AsyncMock(return_value={"ok": 1.0})
    monkeypatch.setattr(mongo_manager, "db", fake_db)

    response = await test_client.get("/healthcheck")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["overall_status"] == "ok"
    assert body["components"]["database_mongodb"]["status"] == "ok"


async def test_healthcheck_reports_ping_failure(test_client: AsyncClient, monkeypatch):
    fake_db = MagicMock()
    fake_db.command = AsyncMock(side_effect=ConnectionError("no route to host"))
    monkeypatch.setattr(mongo_manager, "db", fake_db)

    response = await test_client.get("/healthcheck")
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["overall_status"] == "error"


async def test_healthcheck_without_connection(test_client: AsyncClient, monkeypatch):
    monkeypatch.setattr(mongo_manager, "db", None)
    response = await test_client.get("/healthcheck")
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["components"]["database_mongodb"]["status"] == "unavailable"
