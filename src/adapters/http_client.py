"""httpx wrapper.

Why a wrapper:
- Base URL, timeouts, headers and credentials are set once for every call to
  the deployment API.
- Tests swap the network for an `httpx.MockTransport` through `transport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings
from core.domain.context import ListContext


def build_async_client(
    context: ListContext,
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` bound to the API of `context`."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if context.token:
        headers["Authorization"] = f"Bearer {context.token}"

    params: dict[str, str] = {}
    if context.team is not None:
        if context.team.id:
            params["teamId"] = context.team.id
        elif context.team.slug:
            params["slug"] = context.team.slug

    return httpx.AsyncClient(
        base_url=context.api_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        params=params,
        transport=transport,
    )
