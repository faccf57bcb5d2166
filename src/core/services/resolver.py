"""Resolution of a user-supplied target into deployments.

The lookup is an ordered list of strategies. Each one returns a (possibly
empty) list and the first non-empty answer wins:

1. direct listing, filtered by application name;
2. single deployment lookup by identifier or URL;
3. alias indirection: find the alias, then look up its deployment.

Only an empty answer falls through. Errors raised by the source propagate
unchanged and stop the resolution.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from core.domain.models import Deployment
from core.errors import UsageError
from core.interfaces.deployments import DeploymentSource

logger = logging.getLogger(__name__)

EXPAND_WITHOUT_TARGET = "You must define an app when using `--all`"


async def _list_direct(source: DeploymentSource, target: str | None) -> list[Deployment]:
    return list(await source.list_deployments(target))


async def _lookup_single(source: DeploymentSource, target: str | None) -> list[Deployment]:
    if not target:
        return []
    match = await source.find_deployment(target)
    return [match] if match is not None else []


async def _lookup_alias(source: DeploymentSource, target: str | None) -> list[Deployment]:
    aliases = await source.list_aliases()
    item = next((a for a in aliases if a.uid == target or a.alias == target), None)
    if item is None or not item.deployment_id:
        return []
    match = await source.find_deployment(item.deployment_id)
    return [match] if match is not None else []


@dataclass(frozen=True)
class ResolveStrategy:
    name: str
    lookup: Callable[[DeploymentSource, str | None], Awaitable[list[Deployment]]]
    needs_target: bool = True


STRATEGIES: tuple[ResolveStrategy, ...] = (
    ResolveStrategy("listing", _list_direct, needs_target=False),
    ResolveStrategy("deployment", _lookup_single),
    ResolveStrategy("alias", _lookup_alias),
)


async def resolve(
    source: DeploymentSource,
    target: str | None,
    *,
    expand_instances: bool = False,
    strategies: Sequence[ResolveStrategy] = STRATEGIES,
) -> list[Deployment]:
    """Resolve `target` (an app name, identifier, URL or alias) to deployments.

    Raises:
        UsageError: `expand_instances` was requested without a target. No
            source method is called in that case.
    """

    target = (target or "").strip() or None
    if expand_instances and target is None:
        raise UsageError(EXPAND_WITHOUT_TARGET)

    for strategy in strategies:
        if strategy.needs_target and target is None:
            break
        found = await strategy.lookup(source, target)
        if found:
            logger.debug("Resolved %r via %s: %d deployment(s)", target, strategy.name, len(found))
            return found
        logger.debug("No match for %r via %s", target, strategy.name)

    return []
