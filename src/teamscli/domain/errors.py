"""Error taxonomy surfaced by the provisioning and update core."""

from __future__ import annotations


class TeamsCliError(RuntimeError):
    """Base class for errors raised by teams-cli."""


class ValidationError(TeamsCliError, ValueError):
    """Input is malformed or missing a required field; fix the input, do not retry."""


class UpstreamError(TeamsCliError):
    """An external service answered with a non-success HTTP status."""

    def __init__(self, action: str, *, status: int, body: str) -> None:
        super().__init__(f"Failed to {action}: {status} {body}".rstrip())
        self.action = action
        self.status = status
        self.body = body


class NotFoundError(TeamsCliError):
    """An expected sub-resource is absent."""


class Cancelled(TeamsCliError):
    """The operation was aborted by the user or by a per-call timeout."""
