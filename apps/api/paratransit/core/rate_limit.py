"""
Request rate limiting.

Counters are keyed by client address. On /o/{org} routes the organization is
part of the key, so each tenant has its own budget per address.
"""

import logging

import redis
from fastapi import Request
from slowapi import Limiter

from paratransit.core.config import settings


logger = logging.getLogger(__name__)

MEMORY_STORAGE = "memory://"
ORG_ROUTE_PREFIX = "/o/"


def client_address(request: Request) -> str:
    """Caller address; X-Forwarded-For is honored only behind a trusted proxy."""
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "127.0.0.1"


def rate_limit_key(request: Request) -> str:
    """
    Bucket key for a request.

    Runs before routing, so the organization is read from the raw path
    (/o/{org}/...) rather than from path parameters.
    """
    address = client_address(request)
    path = request.url.path
    if path.startswith(ORG_ROUTE_PREFIX):
        org = path[len(ORG_ROUTE_PREFIX):].split("/", 1)[0].lower()
        if org:
            return f"org:{org}:{address}"
    return address


def default_limits() -> list[str]:
    if settings.TESTING or settings.RATE_LIMIT_API <= 0:
        return []
    return [f"{settings.RATE_LIMIT_API}/minute"]


def storage_uri() -> str:
    """Redis when reachable (shared across workers), otherwise in-process memory."""
    if settings.TESTING or not settings.REDIS_URL:
        return MEMORY_STORAGE
    try:
        redis.from_url(settings.REDIS_URL, socket_connect_timeout=1).ping()
    except redis.RedisError as e:
        logger.warning("Redis unavailable for rate limiting, using in-memory: %s", e)
        return MEMORY_STORAGE
    return settings.REDIS_URL


limiter = Limiter(
    key_func=rate_limit_key,
    storage_uri=storage_uri(),
    default_limits=default_limits(),
)
