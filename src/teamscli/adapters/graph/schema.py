"""Pydantic models describing the Microsoft Graph application payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GraphBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ApplicationPayload(GraphBaseModel):
    id: str
    app_id: str = Field(alias="appId")
    display_name: str = Field(default="", alias="displayName")


class PasswordCredentialPayload(GraphBaseModel):
    secret_text: str = Field(alias="secretText", repr=False)
    display_name: str | None = Field(default=None, alias="displayName")
    end_date_time: datetime | None = Field(default=None, alias="endDateTime")
