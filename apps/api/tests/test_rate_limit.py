"""Rate limit keys, storage selection and the internal endpoint limit."""

import pytest
from starlette.requests import Request

from paratransit.core import rate_limit
from paratransit.core.config import settings


def _request(path: str, headers: dict | None = None) -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": ("10.0.0.5", 51000),
    })


def test_org_routes_are_keyed_by_org_and_address():
    assert rate_limit.rate_limit_key(_request("/o/Valley/clients")) == "org:valley:10.0.0.5"
    assert rate_limit.rate_limit_key(_request("/o/hill")) == "org:hill:10.0.0.5"


def test_other_routes_are_keyed_by_address():
    assert rate_limit.rate_limit_key(_request("/health")) == "10.0.0.5"
    assert rate_limit.rate_limit_key(_request("/s/organizations")) == "10.0.0.5"
    assert rate_limit.rate_limit_key(_request("/o/")) == "10.0.0.5"


def test_forwarded_for_only_behind_trusted_proxy(monkeypatch):
    request = _request("/health", {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

    assert rate_limit.client_address(request) == "10.0.0.5"
    monkeypatch.setattr(settings, "TRUST_PROXY_HEADERS", True)
    assert rate_limit.client_address(request) == "203.0.113.9"


def test_testing_uses_memory_storage_without_default_limits():
    assert rate_limit.storage_uri() == rate_limit.MEMORY_STORAGE
    assert rate_limit.default_limits() == []


def test_default_limits_follow_settings(monkeypatch):
    monkeypatch.setattr(settings, "TESTING", False)
    monkeypatch.setattr(settings, "RATE_LIMIT_API", 120)
    assert rate_limit.default_limits() == ["120/minute"]

    monkeypatch.setattr(settings, "RATE_LIMIT_API", 0)
    assert rate_limit.default_limits() == []


@pytest.mark.asyncio
async def test_internal_endpoint_is_rate_limited(client, test_org):
    headers = {"X-Internal-Secret": "wrong"}

    for _ in range(settings.RATE_LIMIT_INTERNAL):
        response = await client.post("/internal/scheduled/driver-digest", headers=headers)
        assert response.status_code == 403

    response = await client.post("/internal/scheduled/driver-digest", headers=headers)
    assert response.status_code == 429
