"""Structured logging helpers (PHI-safe)."""

import logging
import time
import uuid
from typing import Any

from fastapi import Request


logger = logging.getLogger("paratransit.request")

REQUEST_ID_HEADER = "X-Request-ID"


def build_log_context(
    *,
    user_id: str | None = None,
    org: str | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a PHI-safe log context dict."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if org:
        context["org"] = org
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context


def route_template(request: Request) -> str:
    """
    Route template for the matched endpoint, e.g. /o/{org}/clients.

    Some framework versions report only the router-local path (/clients) for
    routes included under a prefix. The missing leading segments are taken from
    the request path, with path parameter values mapped back to their names.
    """
    route = request.scope.get("route")
    if route is None:
        return request.url.path
    template = getattr(route, "path_format", None) or route.path

    path_segments = request.url.path.rstrip("/").split("/")
    template_segments = template.rstrip("/").split("/")
    missing = len(path_segments) - len(template_segments)
    if missing <= 0:
        return template

    unused = {
        str(value): name
        for name, value in request.path_params.items()
        if "{%s}" % name not in template
    }
    prefix = []
    for segment in reversed(path_segments[1:missing + 1]):
        name = unused.pop(segment, None)
        prefix.insert(0, "{%s}" % name if name else segment)
    return "/" + "/".join(prefix) + ("" if template == "/" else template)


async def request_logging_middleware(request: Request, call_next):
    """Attach a request id and log one line per request."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    context = build_log_context(
        org=request.path_params.get("org"),
        request_id=request_id,
        route=route_template(request),
        method=request.method,
    )
    context["status"] = response.status_code
    context["duration_ms"] = round((time.perf_counter() - started) * 1000, 1)
    logger.info("request completed", extra={"context": context})

    response.headers[REQUEST_ID_HEADER] = request_id
    return response
