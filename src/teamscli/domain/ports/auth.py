"""Port for bearer token acquisition."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenProvider(Protocol):
    def get_token(self, scope: str) -> str:
        """Return a bearer token valid for ``scope``."""
        ...
