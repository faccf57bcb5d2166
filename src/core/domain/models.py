"""Domain models (Pydantic v2).

Notes:
- API payloads carry many more fields than the listing needs; every model
  ignores unknown keys.
- `created` arrives as epoch milliseconds. Pydantic interprets integers larger
  than 2e10 as milliseconds, so no custom parsing is needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class Scale(BaseModel):
    """Live scaling information of a deployment."""

    model_config = ConfigDict(extra="ignore")

    current: int = Field(
        default=0,
        ge=0,
        description="Number of instances currently running.",
    )


class Instance(BaseModel):
    """A running replica backing a deployment."""

    model_config = ConfigDict(extra="ignore")

    url: str = Field(..., min_length=1, description="Public URL of the instance.")
    uid: str | None = Field(default=None, description="Instance identifier, when provided.")


class Deployment(BaseModel):
    """One shipped version of an application."""

    model_config = ConfigDict(extra="ignore")

    uid: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("uid", "id"),
        description="Deployment identifier.",
    )
    name: str = Field(
        default="",
        description="Owning application; deployments are grouped by it.",
    )
    url: str = Field(..., min_length=1, description="Hostname the deployment is served on.")
    state: str | None = Field(
        default=None,
        validation_alias=AliasChoices("state", "readyState"),
        description="Platform state (READY, FROZEN, BUILD_ERROR, ...). Absent on failed deployments.",
    )
    created: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("created", "createdAt"),
        description="Creation time.",
    )
    scale: Scale | None = Field(default=None, description="Live instance count, if scaled.")
    instances: list[Instance] = Field(
        default_factory=list,
        description="Running instances; only populated when expansion was requested.",
    )

    @field_validator("name", mode="before")
    @classmethod
    def _missing_name_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Alias(BaseModel):
    """Human-friendly name pointing at a deployment."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    uid: str = Field(..., description="Alias identifier.")
    alias: str = Field(..., description="Alias hostname, e.g. `my-app.example.com`.")
    deployment_id: str | None = Field(
        default=None,
        alias="deploymentId",
        description="Target deployment; absent for path-based alias rules.",
    )


class Team(BaseModel):
    """Team scope. The API accepts either the team id or its slug."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    slug: str | None = None


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str | None = None
    email: str | None = None


@dataclass
class ApplicationGroup:
    """Deployments of one application, in listing order."""

    name: str
    deployments: list[Deployment] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.deployments)

    def listed(self, show_all: bool, cap: int) -> list[Deployment]:
        """Deployments to display: all of them, or the first `cap`."""

        if show_all:
            return list(self.deployments)
        return self.deployments[:cap]
