#!/usr/bin/env python
"""
Pydantic payloads accepted by the event and song request routes.

Field names follow the dashboard's camelCase JSON; snake_case is accepted too.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


class EventCreate(_Payload):
    name: str = Field(min_length=1, max_length=255)
    venue: str = Field(min_length=1, max_length=255)
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    dj_name: str = Field(default="", alias="djName", max_length=255)
    entry_code: str = Field(default="", alias="entryCode", max_length=64)
    request_price: Optional[int] = Field(default=None, alias="requestPrice", ge=0)
    image_url: Optional[str] = Field(default=None, alias="imageUrl", max_length=500)
    is_active: bool = Field(default=True, alias="isActive")

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_naive_utc(cls, value: datetime) -> datetime:
        # Stored naive-UTC, like every other timestamp column
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def _ends_after_start(self) -> "EventCreate":
        if self.end_time < self.start_time:
            raise ValueError("endTime must not be before startTime")
        return self


class SongRequestCreate(_Payload):
    song_name: str = Field(alias="songName", min_length=1, max_length=255)
    artist_name: str = Field(alias="artistName", min_length=1, max_length=255)
    requester_name: str = Field(alias="requesterName", min_length=1, max_length=255)
    wishes: str = ""


class StatusUpdate(_Payload):
    status: Literal["pending", "played", "skipped"]


def validation_details(error: ValidationError) -> List[str]:
    """Flatten pydantic errors into JSON-safe ``field: message`` strings."""
    details = []
    for err in error.errors(include_url=False):
        location = ".".join(str(part) for part in err.get("loc", ())) or "payload"
        details.append(f"{location}: {err.get('msg')}")
    return details


__all__ = ["EventCreate", "SongRequestCreate", "StatusUpdate", "validation_details"]
