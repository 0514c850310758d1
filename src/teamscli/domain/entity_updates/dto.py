"""Validated partial updates for application records."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Final

from teamscli.domain.errors import ValidationError
from teamscli.domain.model import AppRecordField
from teamscli.domain.validation import validate_https_url, validate_length


@dataclass(frozen=True, slots=True)
class FieldRule:
    record_field: AppRecordField
    label: str
    required: bool = True
    max_length: int | None = None
    https_url: bool = False


FIELD_RULES: Final[dict[str, FieldRule]] = {
    "short_name": FieldRule(AppRecordField.SHORT_NAME, "Short name", max_length=30),
    "long_name": FieldRule(AppRecordField.LONG_NAME, "Long name", required=False, max_length=100),
    "short_description": FieldRule(
        AppRecordField.SHORT_DESCRIPTION, "Short description", max_length=80
    ),
    "long_description": FieldRule(
        AppRecordField.LONG_DESCRIPTION, "Long description", max_length=4000
    ),
    "version": FieldRule(AppRecordField.VERSION, "Version"),
    "developer_name": FieldRule(AppRecordField.DEVELOPER_NAME, "Developer name"),
    "website_url": FieldRule(AppRecordField.WEBSITE_URL, "Website URL", https_url=True),
    "privacy_url": FieldRule(AppRecordField.PRIVACY_URL, "Privacy URL", https_url=True),
    "terms_of_use_url": FieldRule(
        AppRecordField.TERMS_OF_USE_URL, "Terms of Use URL", https_url=True
    ),
}


@dataclass(frozen=True, slots=True)
class AppDetailsUpdate:
    """Changes to the editable fields of an app; ``None`` means "leave unchanged"."""

    short_name: str | None = None
    long_name: str | None = None
    short_description: str | None = None
    long_description: str | None = None
    version: str | None = None
    developer_name: str | None = None
    website_url: str | None = None
    privacy_url: str | None = None
    terms_of_use_url: str | None = None

    def __post_init__(self) -> None:
        for attribute in fields(self):
            value = getattr(self, attribute.name)
            if value is None:
                continue
            object.__setattr__(self, attribute.name, _validate(FIELD_RULES[attribute.name], value))

    @property
    def is_empty(self) -> bool:
        return not self.to_changes()

    def to_changes(self) -> dict[str, str]:
        """Return only the supplied fields, keyed by their record names."""

        changes: dict[str, str] = {}
        for attribute in fields(self):
            value = getattr(self, attribute.name)
            if value is not None:
                changes[FIELD_RULES[attribute.name].record_field.value] = value
        return changes


def _validate(rule: FieldRule, raw: str) -> str:
    validate_length(raw, label=rule.label, max_length=rule.max_length)
    value = raw.strip()
    if rule.required and not value:
        raise ValidationError(f"{rule.label} is required")
    if rule.https_url:
        value = validate_https_url(value, label=rule.label)
    return value
