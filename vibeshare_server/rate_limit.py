# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-memory sliding-window rate limiting for login and registration."""

import logging
import time
from collections import defaultdict, deque

from fastapi import HTTPException, Request, status

from vibeshare_server.config import settings

logger = logging.getLogger(__name__)

# (client, path) -> timestamps inside the current window
_hits: defaultdict[tuple[str, str], deque[float]] = defaultdict(deque)


def _limits() -> dict[str, int]:
    return {
        "/api/v1/auth/login": settings.rate_limit_login,
        "/api/v1/auth/register": settings.rate_limit_register,
    }


def _client_key(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def reset() -> None:
    _hits.clear()


def check_rate_limit(request: Request, path: str) -> None:
    """Raise 429 once a client has used up its allowance for ``path``."""
    limit = _limits().get(path)
    if limit is None:
        return
    now = time.monotonic()
    client = _client_key(request)
    window = _hits[(client, path)]
    while window and window[0] <= now - settings.rate_limit_window_seconds:
        window.popleft()
    if len(window) >= limit:
        logger.warning("Rate limit hit for %s on %s", client, path)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
        )
    window.append(now)


async def rate_limit_auth_dep(request: Request) -> None:
    """FastAPI dependency guarding the auth endpoints."""
    check_rate_limit(request, request.url.path.rstrip("/"))
