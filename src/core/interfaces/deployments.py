"""Contract of the deployment listing service."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import Alias, Deployment, Instance


@runtime_checkable
class DeploymentSource(Protocol):
    """Read-only access to the deployment inventory.

    Design rules:
    - Every method is async because it performs I/O.
    - Failures raise `core.errors.TransportError`; "nothing found" is an
      empty sequence (or `None` for single lookups).
    """

    async def list_deployments(self, app: str | None = None) -> Sequence[Deployment]:
        """List deployments, optionally filtered by application name."""

        ...

    async def find_deployment(self, identifier_or_url: str) -> Deployment | None:
        """Look up one deployment by identifier or URL."""

        ...

    async def list_instances(self, deployment_uid: str) -> Sequence[Instance]:
        ...

    async def list_aliases(self) -> Sequence[Alias]:
        ...
