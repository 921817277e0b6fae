"""Health check, request ids and PHI-safe log context."""

import logging
from types import SimpleNamespace

import pytest
from starlette.requests import Request

from paratransit.core.structured_logging import (
    REQUEST_ID_HEADER,
    build_log_context,
    route_template,
)


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["env"] == "test"


@pytest.mark.asyncio
async def test_request_id_is_generated(client):
    response = await client.get("/health")
    assert len(response.headers[REQUEST_ID_HEADER]) == 32


@pytest.mark.asyncio
async def test_request_id_is_propagated(client):
    response = await client.get("/health", headers={REQUEST_ID_HEADER: "abc-123"})
    assert response.headers[REQUEST_ID_HEADER] == "abc-123"


@pytest.mark.asyncio
async def test_request_log_line_uses_route_template(admin_client, caplog):
    with caplog.at_level(logging.INFO, logger="paratransit.request"):
        response = await admin_client.get("/o/testorg/clients", params={"search": "Margaret"})

    assert response.status_code == 200
    record = next(r for r in caplog.records if r.name == "paratransit.request")
    assert record.context["org"] == "testorg"
    assert record.context["route"] == "/o/{org}/clients"
    assert record.context["status"] == 200
    # Query strings can carry rider names
    assert "Margaret" not in str(record.context)


def test_build_log_context_drops_empty_fields():
    assert build_log_context(org="testorg", user_id=None, method="GET") == {
        "org": "testorg",
        "method": "GET",
    }


@pytest.mark.asyncio
async def test_request_log_line_keeps_nested_path_params(admin_client, make_client, caplog):
    rider = make_client()

    with caplog.at_level(logging.INFO, logger="paratransit.request"):
        response = await admin_client.get(f"/o/testorg/clients/{rider.id}")

    assert response.status_code == 200
    record = next(r for r in caplog.records if r.name == "paratransit.request")
    assert record.context["route"] == "/o/{org}/clients/{client_id}"
    assert str(rider.id) not in str(record.context)


def _request(path: str, route_path: str | None, **path_params) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [],
        "path_params": path_params,
    }
    if route_path is not None:
        scope["route"] = SimpleNamespace(path=route_path, path_format=route_path)
    return Request(scope)


@pytest.mark.parametrize(
    "path,route_path,params,expected",
    [
        ("/o/valley/clients", "/o/{org}/clients", {"org": "valley"}, "/o/{org}/clients"),
        ("/o/valley/clients", "/clients", {"org": "valley"}, "/o/{org}/clients"),
        ("/o/valley/clients/", "/clients/", {"org": "valley"}, "/o/{org}/clients/"),
        (
            "/o/valley/users/42/unavailability",
            "/users/{user_id}/unavailability",
            {"org": "valley", "user_id": "42"},
            "/o/{org}/users/{user_id}/unavailability",
        ),
        ("/o/o/dashboard", "/dashboard", {"org": "o"}, "/o/{org}/dashboard"),
        ("/health", "/health", {}, "/health"),
        ("/nowhere", None, {}, "/nowhere"),
    ],
)
def test_route_template_restores_router_prefix(path, route_path, params, expected):
    assert route_template(_request(path, route_path, **params)) == expected
