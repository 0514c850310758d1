"""Ports for resources edited through read-modify-write."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ResourceStore(Protocol):
    """Upstream resource that only supports whole-object replacement."""

    def fetch(self, resource_id: str) -> dict[str, Any]: ...

    def replace(self, resource_id: str, resource: dict[str, Any]) -> dict[str, Any]: ...
