"""Bot channel registrations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TEAMS_CHANNEL = "msteams"


@dataclass(frozen=True, slots=True)
class ChannelOptions:
    bot_id: str
    name: str
    endpoint: str


@dataclass(slots=True)
class ChannelRegistration:
    """Routing configuration of a bot; replaced wholesale on every edit.

    ``extra`` holds upstream keys this tool does not model so a fetched
    registration can be mutated in place and submitted back without loss.
    """

    bot_id: str
    name: str
    messaging_endpoint: str
    calling_endpoint: str = ""
    description: str = ""
    configured_channels: list[str] = field(default_factory=lambda: [TEAMS_CHANNEL])
    is_single_tenant: bool = True
    extra: dict[str, Any] = field(default_factory=dict[str, Any])

    @classmethod
    def for_new_bot(cls, options: ChannelOptions) -> ChannelRegistration:
        return cls(
            bot_id=options.bot_id,
            name=options.name,
            messaging_endpoint=options.endpoint,
        )
