#!/usr/bin/env python
"""
Pydantic model for tracks reported by the DJ software.

Tracks only live in the bridge's memory; ids are whatever the DJ software
(or the simulator) hands us and are unique only within the current
playlist/current-track scope.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TrackStatus = Literal["playing", "queued", "played"]


class Track(BaseModel):
    """One piece of music known to the bridge."""

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    id: str
    title: str
    artist: str
    album: Optional[str] = None

    # Seconds; 0 means the source did not report a length
    duration: int = Field(default=0, ge=0)
    position: int = Field(default=0, ge=0)

    status: TrackStatus = "queued"
    played_at: Optional[datetime] = Field(default=None, alias="playedAt")

    def to_wire(self) -> dict:
        """JSON-ready dict using the camelCase names viewers expect."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["Track", "TrackStatus"]
