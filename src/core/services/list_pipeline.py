"""Listing orchestration: resolve, then aggregate.

The CLI delegates the whole fetch side of `shipls ls` to `run_listing`, which
keeps printing out of the core. Nothing is rendered until both stages have
finished, so a fatal error never leaves a half-written table behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from core.domain.models import ApplicationGroup
from core.interfaces.deployments import DeploymentSource
from core.services.aggregator import aggregate
from core.services.ordering import GroupOrderKey, by_recency
from core.services.resolver import resolve

logger = logging.getLogger(__name__)


@dataclass
class ListRequest:
    """Parameters of one listing run."""

    target: str | None = None
    expand_instances: bool = False


@dataclass
class ListResult:
    """Output of a listing run."""

    groups: list[ApplicationGroup]
    started_at: datetime
    finished_at: datetime

    @property
    def total(self) -> int:
        return sum(group.total for group in self.groups)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def run_listing(
    *,
    source: DeploymentSource,
    request: ListRequest,
    order_key: GroupOrderKey = by_recency,
    started_at: datetime | None = None,
) -> ListResult:
    started_at = started_at or _utcnow()

    deployments = await resolve(
        source,
        request.target,
        expand_instances=request.expand_instances,
    )
    if not deployments:
        logger.info("No deployments found for %r", request.target)

    groups = await aggregate(
        deployments,
        expand_instances=request.expand_instances,
        source=source,
        order_key=order_key,
    )

    return ListResult(
        groups=groups,
        started_at=started_at,
        finished_at=_utcnow(),
    )
