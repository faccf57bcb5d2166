"""Grouping of resolved deployments into applications.

`aggregate` is a pure transform: the input deployments are never mutated.
When instance expansion is requested, every deployment gets an updated copy
carrying its instances. Instance lookups run concurrently and fail
independently: a failed lookup leaves that deployment without instances.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from core.domain.models import ApplicationGroup, Deployment, Instance
from core.errors import TransportError
from core.interfaces.deployments import DeploymentSource
from core.services.ordering import GroupOrderKey, by_recency

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstanceFetch:
    """Outcome of one instance lookup."""

    deployment_uid: str
    instances: list[Instance] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _fetch_instances(source: DeploymentSource, deployment: Deployment) -> InstanceFetch:
    try:
        instances = await source.list_instances(deployment.uid)
    except TransportError as exc:
        return InstanceFetch(deployment.uid, error=exc.message)
    except Exception as exc:
        logger.debug("Instance lookup of %s crashed", deployment.uid, exc_info=True)
        return InstanceFetch(deployment.uid, error=f"Unknown error: {exc}")
    return InstanceFetch(deployment.uid, instances=list(instances))


async def attach_instances(
    source: DeploymentSource,
    deployments: Sequence[Deployment],
) -> list[Deployment]:
    """Return copies of `deployments` with their live instances attached."""

    fetches = await asyncio.gather(*(_fetch_instances(source, d) for d in deployments))
    for deployment, fetch in zip(deployments, fetches):
        if not fetch.ok:
            logger.warning("Could not list instances of %s: %s", deployment.url, fetch.error)
    return [
        deployment.model_copy(update={"instances": fetch.instances})
        for deployment, fetch in zip(deployments, fetches)
    ]


def group_by_application(deployments: Sequence[Deployment]) -> list[ApplicationGroup]:
    """Partition by `name`, keeping first-seen application and member order."""

    groups: dict[str, ApplicationGroup] = {}
    for deployment in deployments:
        group = groups.get(deployment.name)
        if group is None:
            group = groups[deployment.name] = ApplicationGroup(name=deployment.name)
        group.deployments.append(deployment)
    return list(groups.values())


async def aggregate(
    deployments: Sequence[Deployment],
    *,
    expand_instances: bool = False,
    source: DeploymentSource | None = None,
    order_key: GroupOrderKey = by_recency,
) -> list[ApplicationGroup]:
    """Group deployments by application and order the groups.

    Members keep the order they were resolved in; only the groups are sorted.
    """

    if expand_instances:
        if source is None:
            raise ValueError("a deployment source is required to expand instances")
        deployments = await attach_instances(source, deployments)

    return sorted(group_by_application(deployments), key=order_key)
