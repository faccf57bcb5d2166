"""Shared fixtures for the shipls test-suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from core.domain.models import Deployment
from core.interfaces.deployments import DeploymentSource

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_deployment() -> Callable[..., Deployment]:
    """Factory for deployments; `age` is a timedelta before NOW."""

    counter = {"n": 0}

    def factory(
        name: str = "api",
        *,
        url: str | None = None,
        age: timedelta | None = timedelta(hours=1),
        **fields: Any,
    ) -> Deployment:
        counter["n"] += 1
        n = counter["n"]
        payload: dict[str, Any] = {
            "uid": fields.pop("uid", f"dpl_{n}"),
            "name": name,
            "url": url or f"{name}-{n}.example.app",
            "state": fields.pop("state", "READY"),
            "created": NOW - age if age is not None else None,
        }
        payload.update(fields)
        return Deployment.model_validate(payload)

    return factory


@pytest.fixture
def source() -> AsyncMock:
    """Deployment source that finds nothing unless told otherwise."""

    mock = AsyncMock(spec=DeploymentSource)
    mock.list_deployments.return_value = []
    mock.find_deployment.return_value = None
    mock.list_instances.return_value = []
    mock.list_aliases.return_value = []
    return mock


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Keep AppSettings away from the developer's real config."""

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.chdir(tmp_path)
    for key in ("TOKEN", "TEAM_ID", "TEAM_SLUG", "USER_USERNAME", "USER_EMAIL", "API_URL", "DEBUG", "INCLUDE_SCHEME"):
        monkeypatch.delenv(f"SHIPLS_{key}", raising=False)
