"""Persist provisioning credentials to a dotenv file."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import set_key

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EnvFileSink:
    """Upsert ``KEY=VALUE`` lines, leaving every other line of the file untouched."""

    path: Path

    def write(self, values: Mapping[str, str | None]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        for key, value in values.items():
            if value is None:
                continue
            set_key(self.path, key, value, quote_mode="never")
        log.debug("Wrote %d key(s) to %s", sum(v is not None for v in values.values()), self.path)
