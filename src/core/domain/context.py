"""Immutable execution context for one listing run."""

from __future__ import annotations

from dataclasses import dataclass

from core.domain.models import Team, User


@dataclass(frozen=True)
class ListContext:
    """Everything a listing run needs to know about the account and the user.

    Built once by the CLI from settings and flags, then passed explicitly to
    the API adapter and the presenter.
    """

    api_url: str
    token: str | None = None
    team: Team | None = None
    user: User | None = None
    debug: bool = False
    include_scheme: bool = False

    @property
    def scope_label(self) -> str:
        """Team slug, else username, else email."""

        if self.team and self.team.slug:
            return self.team.slug
        if self.user:
            if self.user.username:
                return self.user.username
            if self.user.email:
                return self.user.email
        return "unknown"

    @property
    def url_scheme(self) -> str:
        return "https://" if self.include_scheme else ""
