"""Deployment API client.

Implements `core.interfaces.deployments.DeploymentSource` over HTTP.

Endpoints:
- `GET /v2/now/deployments[?app=]`           -> {"deployments": [...]}
- `GET /v3/now/deployments/{id}`             -> deployment
- `GET /v3/now/hosts/{host}`                 -> {"deployment": {...}}
- `GET /v1/now/deployments/{uid}/instances`  -> {"instances": [...]}
- `GET /v2/now/aliases`                      -> {"aliases": [...]}

Every failure (network, HTTP status, unreadable body) becomes a
`TransportError`. A 404 on a single lookup means "not found" and returns
`None`. Records that fail validation are skipped with a warning.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote, urlsplit

import httpx
from pydantic import BaseModel, ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.context import ListContext
from core.domain.models import Alias, Deployment, Instance
from core.errors import TransportError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_host(value: str) -> str:
    """Strip scheme, path and port from a URL-like value."""

    if "://" in value:
        return urlsplit(value).hostname or value
    return value.split("/", 1)[0].split(":", 1)[0]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return f"HTTP {response.status_code} from {response.request.url.path}"


def _parse_many(model: type[ModelT], items: Any, kind: str) -> list[ModelT]:
    if not isinstance(items, list):
        raise TransportError(f"Unexpected {kind} payload from the API")
    parsed: list[ModelT] = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid %s record: %s", kind, exc.errors()[0].get("msg"))
    return parsed


class DeploymentsAPI:
    """Async client for the deployment inventory."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_context(
        cls,
        context: ListContext,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "DeploymentsAPI":
        return cls(build_async_client(context, settings, transport=transport))

    async def __aenter__(self) -> "DeploymentsAPI":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, path: str, params: dict[str, str] | None = None) -> httpx.Response:
        try:
            return await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {path} failed: {exc}") from exc

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        path = response.request.url.path
        if response.status_code in (401, 403):
            raise TransportError(
                "Authentication failed. Check your token (SHIPLS_TOKEN or --token).",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise TransportError(_error_message(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON returned by {path}") from exc
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected payload returned by {path}")
        return data

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        return self._decode(await self._send(path, params))

    async def _find_json(self, path: str) -> dict[str, Any] | None:
        response = await self._send(path)
        if response.status_code == 404:
            return None
        return self._decode(response)

    async def list_deployments(self, app: str | None = None) -> list[Deployment]:
        params = {"app": app} if app else None
        data = await self._get_json("/v2/now/deployments", params)
        deployments = _parse_many(Deployment, data.get("deployments", []), "deployment")
        logger.debug("Listed %d deployment(s) for app=%r", len(deployments), app)
        return deployments

    async def find_deployment(self, identifier_or_url: str) -> Deployment | None:
        value = identifier_or_url.strip()
        if not value:
            return None

        if "." in value:
            host = to_host(value)
            data = await self._find_json(f"/v3/now/hosts/{quote(host, safe='')}")
            payload = data.get("deployment") if data else None
        else:
            payload = await self._find_json(f"/v3/now/deployments/{quote(value, safe='')}")

        if not payload:
            return None
        try:
            return Deployment.model_validate(payload)
        except ValidationError:
            logger.warning("Deployment %r returned an invalid record", value)
            return None

    async def list_instances(self, deployment_uid: str) -> list[Instance]:
        data = await self._get_json(f"/v1/now/deployments/{quote(deployment_uid, safe='')}/instances")
        return _parse_many(Instance, data.get("instances", []), "instance")

    async def list_aliases(self) -> list[Alias]:
        data = await self._get_json("/v2/now/aliases")
        return _parse_many(Alias, data.get("aliases", []), "alias")
