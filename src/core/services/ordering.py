"""Default ordering of application groups.

The project in the current directory comes first, then applications by
their most recent deployment, newest first. Names break remaining ties, so
the order is total: the same groups always come out in the same order.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

from core.domain.models import ApplicationGroup
from core.formatting import as_utc

logger = logging.getLogger(__name__)

GroupOrderKey = Callable[[ApplicationGroup], Any]

_PROJECT_FILES = ("now.json", "package.json")


def _read_project_name(path: Path) -> str | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return None
    name = data.get("name") if isinstance(data, dict) else None
    if isinstance(name, str) and name.strip():
        return name.strip()
    return None


def detect_local_app_name(cwd: Path | None = None, *, local_config: Path | None = None) -> str | None:
    """Application name declared by the local project, if any.

    `local_config` points at an explicit `now.json` and replaces the lookup
    of `now.json` and `package.json` in `cwd`.
    """

    if local_config is not None:
        if not local_config.is_file():
            logger.warning("Local config %s does not exist", local_config)
            return None
        return _read_project_name(local_config)

    base = cwd or Path.cwd()
    for filename in _PROJECT_FILES:
        path = base / filename
        if not path.is_file():
            continue
        name = _read_project_name(path)
        if name:
            return name
    return None


def _newest_timestamp(group: ApplicationGroup) -> float | None:
    stamps = [as_utc(d.created).timestamp() for d in group.deployments if d.created is not None]
    return max(stamps) if stamps else None


def build_order_key(local_app_name: str | None = None) -> GroupOrderKey:
    def order_key(group: ApplicationGroup) -> tuple[int, int, float, str]:
        newest = _newest_timestamp(group)
        return (
            0 if local_app_name is not None and group.name == local_app_name else 1,
            0 if newest is not None else 1,
            -(newest or 0.0),
            group.name,
        )

    return order_key


by_recency = build_order_key()
