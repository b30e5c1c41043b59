"""Domain models for shows and participants."""

from datetime import UTC, datetime, timedelta

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

MAX_SHOW_PARTICIPANTS = 4
DEFAULT_SHOW_DURATION_MINUTES = 15
PLAYED_STATUS = "ha sido reproducido"


class Participant(BaseModel):
    """A user that can be assigned to a show."""

    model_config = ConfigDict(
        populate_by_name=True, coerce_numbers_to_str=True, extra="ignore"
    )

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    status: str | None = None
    energy: str | None = None
    element: str | None = None
    essence: str | None = None
    engraving: str | None = None


class Show(BaseModel):
    """A scheduled timed session with up to four participants."""

    model_config = ConfigDict(
        populate_by_name=True, coerce_numbers_to_str=True, extra="ignore"
    )

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    start_time: datetime = Field(
        validation_alias=AliasChoices("startTime", "start_time")
    )
    end_time: datetime | None = Field(
        default=None, validation_alias=AliasChoices("endTime", "end_time")
    )
    duration: int = DEFAULT_SHOW_DURATION_MINUTES
    status: str = "scheduled"
    clients: list[Participant] = Field(default_factory=list)

    @field_validator("clients", mode="before")
    @classmethod
    def _expand_client_ids(cls, value: object) -> object:
        # Unpopulated references arrive as bare ids.
        if isinstance(value, list):
            return [
                {"_id": item} if isinstance(item, str | int) else item
                for item in value
            ]
        return value

    @property
    def resolved_end_time(self) -> datetime:
        """Return the end time, deriving it from the duration when absent."""
        if self.end_time is not None:
            return self.end_time
        return self.start_time + timedelta(minutes=self.duration)

    @property
    def start_time_formatted(self) -> str:
        return format_timestamp(self.start_time)

    @property
    def end_time_formatted(self) -> str:
        return format_timestamp(self.resolved_end_time)

    @property
    def participant_ids(self) -> list[str]:
        return [client.id for client in self.clients]

    @property
    def remaining_capacity(self) -> int:
        return max(MAX_SHOW_PARTICIPANTS - len(self.clients), 0)


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as ISO-8601 UTC with a trailing Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
