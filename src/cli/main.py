"""shipls command-line interface."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from adapters.deployments_api import DeploymentsAPI
from cli import doctor
from cli.ui_components import RenderOptions, render
from core.config import AppSettings, build_context, load_settings
from core.domain.context import ListContext
from core.errors import TransportError, UsageError
from core.logging_utils import configure_logging
from core.services.list_pipeline import ListRequest, ListResult, run_listing
from core.services.ordering import GroupOrderKey, build_order_key, detect_local_app_name

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="List deployments, grouped by application.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

_LS_EPILOG = """\
Examples:

  List all deployments: shipls ls

  List all deployments for the app `my-app`: shipls ls my-app

  List all deployments and all instances for the app `my-app`: shipls ls my-app --all
"""


def supports_styling(console: Console) -> bool:
    """Whether `console` writes to a terminal that understands colors."""

    return console.color_system is not None


async def collect(
    *,
    context: ListContext,
    settings: AppSettings,
    request: ListRequest,
    order_key: GroupOrderKey,
    started_at: datetime,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ListResult:
    async with DeploymentsAPI.from_context(context, settings, transport=transport) as api:
        return await run_listing(
            source=api,
            request=request,
            order_key=order_key,
            started_at=started_at,
        )


def _fail(message: str) -> typer.Exit:
    _err_console.print(f"[red]> Error![/red] {escape(message)}")
    return typer.Exit(code=1)


def _write(report: str) -> None:
    try:
        sys.stdout.write(report)
        sys.stdout.flush()
    except BrokenPipeError:
        # Reader went away (`shipls ls | head`): silence the interpreter's final flush.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        raise typer.Exit(code=0)


@app.command("ls", epilog=_LS_EPILOG)
def list_deployments(
    ctx: typer.Context,
    app_name: Annotated[
        str | None,
        typer.Argument(metavar="[APP]", help="Application name, deployment id, URL or alias."),
    ] = None,
    show_all: Annotated[
        bool,
        typer.Option("--all", help="See all instances for an app."),
    ] = False,
    debug: Annotated[bool, typer.Option("--debug", "-d", help="Debug mode.")] = False,
    token: Annotated[str | None, typer.Option("--token", "-t", help="Login token.")] = None,
    team: Annotated[str | None, typer.Option("--team", "-T", help="Set a custom team scope.")] = None,
    local_config: Annotated[
        Path | None,
        typer.Option("--local-config", "-A", metavar="FILE", help="Path to the local `now.json` file."),
    ] = None,
    global_config: Annotated[
        Path | None,
        typer.Option("--global-config", "-Q", metavar="DIR", help="Path to the global config directory."),
    ] = None,
) -> None:
    """List deployments, optionally only those of one application."""

    if app_name == "help":
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    settings = load_settings(global_config)
    context = build_context(settings, token=token, team=team, debug=debug)
    configure_logging(debug=context.debug)
    started_at = datetime.now(timezone.utc)

    try:
        result = asyncio.run(
            collect(
                context=context,
                settings=settings,
                request=ListRequest(target=app_name, expand_instances=show_all),
                order_key=build_order_key(detect_local_app_name(local_config=local_config)),
                started_at=started_at,
            )
        )
    except UsageError as exc:
        raise _fail(exc.message) from exc
    except TransportError as exc:
        logger.debug("API request failed", exc_info=True)
        raise _fail(exc.message) from exc
    except Exception as exc:
        logger.debug("Unexpected failure", exc_info=True)
        raise _fail(f"Unknown error: {exc}") from exc

    report = render(
        result.groups,
        RenderOptions(
            show_all=show_all,
            styled=supports_styling(_console),
            url_scheme=context.url_scheme,
            scope=context.scope_label,
            started_at=result.started_at,
            now=result.finished_at,
        ),
    )
    _write(report)


app.command("list", hidden=True, epilog=_LS_EPILOG)(list_deployments)


def run() -> None:
    # Windows consoles default to cp1252, which cannot encode the report glyphs.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app()


if __name__ == "__main__":
    run()
