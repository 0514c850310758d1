"""Partial updates applied to full upstream resources."""

from __future__ import annotations

from .apply import merge_fields, update_resource
from .dto import FIELD_RULES, AppDetailsUpdate, FieldRule

__all__ = [
    "FIELD_RULES",
    "AppDetailsUpdate",
    "FieldRule",
    "merge_fields",
    "update_resource",
]
