"""Terminal rendering of the deployment report (Rich).

Layout of `shipls ls`:

    > 2 deployments found under my-team [412ms]

    api (2 of 2 total)
     url                       inst #    state                 age
     api-1.example.app              1    READY                  1h
     api-2.example.app              ✖    DEPLOYMENT_ERROR       2h

Every cell is a `rich.text.Text` padded by its printable width, so the escape
codes added by styling never shift a column. Styled output is exported through
a Rich console forced into terminal mode; unstyled output is the plain text of
the same lines.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Sequence

from rich.console import Console
from rich.text import Text

from core.domain.models import ApplicationGroup, Deployment
from core.formatting import as_utc, format_duration, pluralize

DISPLAY_CAP = 5
URL_PADDING = 5
INSTANCES_WIDTH = 8
STATE_WIDTH = 16
AGE_WIDTH = 8

MISSING_STATE = "DEPLOYMENT_ERROR"
MISSING_SCALE = "✖"
MISSING_AGE = "n/a"

GREY = "bright_black"
_ERROR_STATE = re.compile("ERROR")


@dataclass(frozen=True)
class RenderOptions:
    """Presentation switches for one report."""

    show_all: bool = False
    styled: bool = True
    url_scheme: str = ""
    scope: str = "unknown"
    started_at: datetime | None = None
    now: datetime | None = None
    expand_command: str = "shipls ls --all [app]"


def _all_deployments(groups: Iterable[ApplicationGroup]) -> Iterable[Deployment]:
    for group in groups:
        yield from group.deployments


def url_column_width(groups: Sequence[ApplicationGroup], url_scheme: str = "") -> int:
    """Width of the url column, shared by every application section."""

    longest = max((len(url_scheme + d.url) for d in _all_deployments(groups)), default=0)
    return longest + URL_PADDING


def should_suggest_expansion(groups: Sequence[ApplicationGroup], show_all: bool) -> bool:
    """True when rows are hidden or some deployment runs several instances."""

    if show_all:
        return False
    return any(
        group.total > DISPLAY_CAP
        or any(d.scale is not None and d.scale.current > 1 for d in group.deployments)
        for group in groups
    )


def display_state(state: str | None) -> tuple[str, str | None]:
    """State label and its emphasis style."""

    label = MISSING_STATE if state is None else state
    if _ERROR_STATE.search(label):
        return label, "red"
    if label == "FROZEN":
        return label, GREY
    return label, None


def _cell(value: str, width: int, *, style: str | None = None, right: bool = False) -> Text:
    text = Text()
    text.append(value, style=style)
    gap = max(0, width - text.cell_len)
    if right:
        text.pad_left(gap)
    else:
        text.pad_right(gap)
    return text


def _age(created: datetime | None, now: datetime) -> str:
    if created is None:
        return MISSING_AGE
    return format_duration(now - as_utc(created))


def _deployment_rows(deployment: Deployment, url_width: int, options: RenderOptions, now: datetime) -> list[Text]:
    state, state_style = display_state(deployment.state)
    instances = str(deployment.scale.current) if deployment.scale is not None else MISSING_SCALE

    rows = [
        Text.assemble(
            " ",
            _cell(options.url_scheme + deployment.url, url_width + 1, style="underline"),
            " ",
            _cell(instances, INSTANCES_WIDTH, right=True),
            "    ",
            _cell(state, STATE_WIDTH, style=state_style),
            " ",
            _cell(_age(deployment.created, now), AGE_WIDTH, right=True),
        )
    ]

    if deployment.instances:
        for instance in deployment.instances:
            line = Text(" - ")
            line.append(options.url_scheme + instance.url, style="underline")
            line.pad_right(max(0, url_width + 1 - line.cell_len))
            rows.append(Text.assemble(" ", line))
        rows.append(Text())
    return rows


def build_report(groups: Sequence[ApplicationGroup], options: RenderOptions) -> list[Text]:
    """Lines of the report, styled but not yet exported."""

    now = as_utc(options.now or datetime.now(timezone.utc))
    started_at = as_utc(options.started_at) if options.started_at else now
    url_width = url_column_width(groups, options.url_scheme)
    total = sum(group.total for group in groups)

    lines = [
        Text.assemble(
            "> ",
            pluralize("deployment", total),
            " found under ",
            (options.scope, "bold"),
            " ",
            (f"[{format_duration(now - started_at)}]", GREY),
        )
    ]
    if should_suggest_expansion(groups, options.show_all):
        lines.append(
            Text.assemble(
                "> To expand the list and see instances run ",
                (f"`{options.expand_command}`", "cyan"),
            )
        )
    lines.append(Text())

    header = (
        f"{'url':<{url_width}}  {'inst #':>{INSTANCES_WIDTH}}    "
        f"{'state':<{STATE_WIDTH}} {'age':>{AGE_WIDTH}}"
    )
    for group in groups:
        listed = group.listed(options.show_all, DISPLAY_CAP)
        lines.append(
            Text.assemble(
                (group.name, "bold"),
                " ",
                (f"({len(listed)} of {group.total} total)", GREY),
            )
        )
        lines.append(Text.assemble(" ", (header, GREY)))
        for deployment in listed:
            lines.extend(_deployment_rows(deployment, url_width, options, now))
        lines.append(Text())

    return lines


def _export_ansi(lines: Sequence[Text]) -> str:
    buffer = io.StringIO()
    width = max((line.cell_len for line in lines), default=0)
    console = Console(
        file=buffer,
        force_terminal=True,
        color_system="standard",
        width=max(80, width + 1),
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )
    for line in lines:
        console.print(line)
    return buffer.getvalue()


def render(groups: Sequence[ApplicationGroup], options: RenderOptions) -> str:
    """Render the full report as a string ready to be written to stdout."""

    lines = build_report(groups, options)
    if options.styled:
        return _export_ansi(lines)
    return "".join(f"{line.plain}\n" for line in lines)
