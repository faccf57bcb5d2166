"""Core configuration.

Why here:
- One place reads the environment (pydantic-settings), so the CLI only parses flags.
- Adapters and the presenter receive the same resolved values through `ListContext`.

Settings come from environment variables (`SHIPLS_*`), a project `.env` and
the per-user `.env` written by `shipls doctor setup` (relocatable with
`--global-config`). The CLI turns them, together with its flags, into an
immutable `ListContext`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.context import ListContext
from core.domain.models import Team, User


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "shipls"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "shipls"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "shipls"
    return Path.home() / ".config" / "shipls"


def get_user_env_file(config_dir: Path | None = None) -> Path:
    return (config_dir or get_user_config_dir()) / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Write or update variables in the user's global `.env`.

    Keys mapped to `None` are left untouched.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# shipls user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SHIPLS_",
        extra="ignore",
        case_sensitive=False,
        # Project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_url: str = Field(
        default="https://api.zeit.co",
        min_length=8,
        description="Base URL of the deployment API.",
    )
    token: str | None = Field(
        default=None,
        description="API token sent as a bearer credential.",
    )
    team_id: str | None = Field(
        default=None,
        description="Team to list deployments for (defaults to the personal account).",
    )
    team_slug: str | None = Field(
        default=None,
        description="Slug of the team; shown as the listing scope.",
    )
    user_username: str | None = Field(default=None, description="Username shown as scope.")
    user_email: str | None = Field(default=None, description="Email shown when no username is set.")

    include_scheme: bool = Field(
        default=False,
        description="Prefix displayed URLs with `https://`.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="shipls/0.1",
        min_length=1,
        description="User-Agent for API requests.",
    )
    debug: bool = Field(default=False, description="Verbose logging on stderr.")


def load_settings(global_config_dir: Path | None = None) -> AppSettings:
    """Load settings, resolving the user `.env` now (inside `global_config_dir` when given)."""

    return AppSettings(_env_file=(".env", str(get_user_env_file(global_config_dir))))


def build_context(
    settings: AppSettings,
    *,
    token: str | None = None,
    team: str | None = None,
    debug: bool = False,
) -> ListContext:
    """Merge settings and command-line overrides into a `ListContext`.

    A `--team` override is passed to the API as a slug and replaces any
    configured team.
    """

    if team:
        scope = Team(slug=team)
    elif settings.team_id or settings.team_slug:
        scope = Team(id=settings.team_id, slug=settings.team_slug)
    else:
        scope = None

    user = None
    if settings.user_username or settings.user_email:
        user = User(username=settings.user_username, email=settings.user_email)

    return ListContext(
        api_url=settings.api_url.rstrip("/"),
        token=token or settings.token,
        team=scope,
        user=user,
        debug=debug or settings.debug,
        include_scheme=settings.include_scheme,
    )
