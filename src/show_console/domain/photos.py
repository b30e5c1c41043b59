"""Domain models for photo capture sessions."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Photo(BaseModel):
    """A captured photo belonging to one capture session."""

    model_config = ConfigDict(
        populate_by_name=True, coerce_numbers_to_str=True, extra="ignore"
    )

    id: str = Field(validation_alias=AliasChoices("photoId", "_id", "id"))
    url: str
    approved: bool = False


class CaptureResult(BaseModel):
    """Backend response to a capture request."""

    model_config = ConfigDict(
        populate_by_name=True, coerce_numbers_to_str=True, extra="ignore"
    )

    session_id: str = Field(validation_alias=AliasChoices("sessionId", "session_id"))
    photo: Photo | None = None
