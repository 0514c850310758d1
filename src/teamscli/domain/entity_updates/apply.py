"""Read-modify-write updates for resources that only accept full replacement."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from teamscli.domain.ports.resources import ResourceStore

log = getLogger(__name__)


def merge_fields(base: Mapping[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    """Return the ordered key union of ``base`` and ``changes``.

    A key present in ``changes`` wins, including explicit ``None`` values; every
    other key keeps the value from ``base``, whether or not this tool knows what it
    means. Base keys keep their order and keys new in ``changes`` are appended. The
    merge is shallow: nested objects are replaced, never combined.
    """

    merged: dict[str, Any] = {}
    for key, value in base.items():
        merged[key] = changes[key] if key in changes else value
    for key, value in changes.items():
        if key not in merged:
            merged[key] = value
    return merged


def update_resource(
    store: ResourceStore,
    resource_id: str,
    changes: Mapping[str, Any],
) -> dict[str, Any]:
    """Fetch ``resource_id``, merge ``changes`` over it and submit the full object.

    The fetch and the replace are independent calls with no concurrency token, so an
    edit made elsewhere between them is overwritten (last writer wins). The returned
    object is the server's response, which may carry recomputed fields.
    """

    current = store.fetch(resource_id)
    merged = merge_fields(current, changes)
    log.debug(
        "Replacing %s with %d changed field(s): %s",
        resource_id,
        len(changes),
        ", ".join(sorted(changes)),
    )
    return store.replace(resource_id, merged)
