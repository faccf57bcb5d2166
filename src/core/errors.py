"""Error hierarchy shared by the listing pipeline and the CLI.

Rules:
- `UsageError` is raised before any network access.
- `TransportError` wraps every failure of the deployment API (HTTP status,
  network, undecodable payload). It is never retried here.
- An empty lookup is not an error: resolvers return `[]`.
"""

from __future__ import annotations


class ShiplsError(Exception):
    """Base exception for every error surfaced to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UsageError(ShiplsError):
    """Invalid combination of command-line arguments."""


class TransportError(ShiplsError):
    """Failure while talking to the deployment API."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
