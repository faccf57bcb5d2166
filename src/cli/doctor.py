"""Doctor command for configuration diagnostics."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from adapters.deployments_api import DeploymentsAPI
from core.config import AppSettings, build_context, get_user_env_file, load_settings, write_user_env_vars
from core.domain.context import ListContext
from core.errors import TransportError

app = typer.Typer(no_args_is_help=True, help="Configuration and connectivity checks.")

_console = Console()

GlobalConfigOption = Annotated[
    Path | None,
    typer.Option("--global-config", "-Q", metavar="DIR", help="Path to the global config directory."),
]


async def _check_api(context: ListContext, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with DeploymentsAPI.from_context(context, settings) as api:
            aliases = await api.list_aliases()
        return True, f"{len(aliases)} alias(es) visible"
    except TransportError as exc:
        return False, exc.message


@app.command()
def run(global_config: GlobalConfigOption = None) -> None:
    """Show the effective configuration and test the API credentials."""

    settings = load_settings(global_config)
    context = build_context(settings)

    table = Table(title="shipls doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("API URL", "OK", context.api_url)
    if context.token:
        table.add_row("Token", "OK", "configured")
    else:
        table.add_row("Token", "MISSING", "Set SHIPLS_TOKEN or run `shipls doctor setup`")
    table.add_row("Scope", "OK" if context.scope_label != "unknown" else "OPTIONAL", context.scope_label)
    styled = _console.color_system is not None
    table.add_row("Styling", "OK" if styled else "PLAIN", _console.color_system or "no color support")

    ok_api, detail_api = asyncio.run(_check_api(context, settings))
    table.add_row("API access", "OK" if ok_api else "FAIL", detail_api)

    _console.print(table)
    if not ok_api:
        raise typer.Exit(code=1)


@app.command()
def setup(global_config: GlobalConfigOption = None) -> None:
    """Interactive setup (stores credentials in the user config .env)."""

    token = typer.prompt("API token", hide_input=True).strip()
    if not token:
        raise typer.BadParameter("a token is required")
    team = typer.prompt("Team slug (empty for personal account)", default="", show_default=False).strip()
    username = typer.prompt("Username", default="", show_default=False).strip()
    email = typer.prompt("Email", default="", show_default=False).strip()

    env_path = write_user_env_vars(
        {
            "SHIPLS_TOKEN": token,
            "SHIPLS_TEAM_SLUG": team or None,
            "SHIPLS_USER_USERNAME": username or None,
            "SHIPLS_USER_EMAIL": email or None,
        },
        get_user_env_file(global_config),
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
