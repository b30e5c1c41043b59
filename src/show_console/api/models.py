"""Pydantic models for console request payloads."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateShowRequest(BaseModel):
    """Payload for scheduling a show."""

    start_time: datetime = Field(alias="startTime")


class PlayRequest(BaseModel):
    """Payload for starting playback."""

    show_id: str = Field(alias="showId")
    language: str | None = None


class StandbyRequest(BaseModel):
    """Payload for sending a show to standby."""

    show_id: str | None = Field(default=None, alias="showId")


class CaptureRequest(BaseModel):
    """Payload for capturing a photo."""

    show_id: str | None = Field(default=None, alias="showId")
    user_ids: list[str] | None = Field(default=None, alias="userIds")
