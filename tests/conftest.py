"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import datetime

import pytest

from show_console.adapters.show_api_client import ShowApiClient
from show_console.config import SUPPORTED_LANGUAGES, Settings
from show_console.containers import AppContainer, build_container
from show_console.domain.errors import InvalidRequestError, ShowApiError
from show_console.domain.photos import CaptureResult, Photo
from show_console.domain.shows import Participant, Show


def make_participant(user_id: str, name: str | None = None) -> Participant:
    return Participant(id=user_id, name=name or f"User {user_id}", status="waiting")


def make_show(
    show_id: str,
    clients: list[Participant] | None = None,
    status: str = "scheduled",
) -> Show:
    return Show.model_validate(
        {
            "_id": show_id,
            "startTime": "2024-06-01T10:00:00Z",
            "duration": 15,
            "status": status,
            "clients": [client.model_dump() for client in clients or []],
        }
    )


@dataclass
class FakeShowApiClient(ShowApiClient):
    """In-memory backend that records every call."""

    shows: dict[str, Show] = field(default_factory=dict)
    waiting_users: list[Participant] = field(default_factory=list)
    photos: dict[str, list[Photo]] = field(default_factory=dict)
    calls: list[tuple[str, tuple[object, ...]]] = field(default_factory=list)
    failures: dict[str, ShowApiError] = field(default_factory=dict)
    next_session_id: str = "sess-1"
    photo_counter: int = 0

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, args))
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def create_show(self, start_time: datetime, duration: int = 15) -> Show:
        self._record("create_show", start_time, duration)
        show = Show(
            id=f"show-{len(self.shows) + 1}", start_time=start_time, duration=duration
        )
        self.shows[show.id] = show
        return show

    async def fetch_waiting_users(self) -> list[Participant]:
        self._record("fetch_waiting_users")
        return list(self.waiting_users)

    async def fetch_available_shows(self) -> list[Show]:
        self._record("fetch_available_shows")
        return list(self.shows.values())

    async def fetch_show(self, show_id: str) -> Show:
        self._record("fetch_show", show_id)
        return self.shows[show_id]

    async def update_show(self, show_id: str, fields: dict[str, object]) -> Show:
        self._record("update_show", show_id, fields)
        updated = self.shows[show_id].model_copy(update=fields)
        self.shows[show_id] = updated
        return updated

    async def assign_user_to_show(self, user_id: str, show_id: str) -> None:
        self._record("assign_user_to_show", user_id, show_id)
        show = self.shows[show_id]
        self.shows[show_id] = show.model_copy(
            update={"clients": [*show.clients, make_participant(user_id)]}
        )

    async def capture_photo(
        self, session_id: str | None, show_id: str | None, user_ids: list[str]
    ) -> CaptureResult:
        self._record("capture_photo", session_id, show_id, user_ids)
        resolved = session_id or self.next_session_id
        self.photo_counter += 1
        photo = Photo(
            id=f"photo-{self.photo_counter}",
            url=f"https://photos.test/{self.photo_counter}.jpg",
        )
        self.photos.setdefault(resolved, []).append(photo)
        return CaptureResult(session_id=resolved, photo=photo)

    async def fetch_photos(self, session_id: str) -> list[Photo]:
        self._record("fetch_photos", session_id)
        return list(self.photos.get(session_id, []))

    async def approve_photo(self, session_id: str, photo_id: str) -> None:
        self._record("approve_photo", session_id, photo_id)

    async def send_user_details(self, show_id: str) -> list[Participant]:
        self._record("send_user_details", show_id)
        return self.shows[show_id].clients

    async def send_play_signal(
        self, show_id: str, user_ids: list[str], language: str
    ) -> None:
        self._record("send_play_signal", show_id, user_ids, language)
        if language not in SUPPORTED_LANGUAGES:
            raise InvalidRequestError(f"Invalid language: {language}")

    async def send_standby_signal(self, show_id: str) -> None:
        self._record("send_standby_signal", show_id)

    async def update_show_status(self, show_id: str, status: str) -> Show:
        self._record("update_show_status", show_id, status)
        updated = self.shows[show_id].model_copy(update={"status": status})
        self.shows[show_id] = updated
        return updated

    async def remove_user_from_show(self, show_id: str, user_id: str) -> None:
        self._record("remove_user_from_show", show_id, user_id)

    async def delete_show(self, show_id: str) -> None:
        self._record("delete_show", show_id)
        self.shows.pop(show_id, None)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        show_api_url="https://backend.test/api",
        photo_poll_interval_seconds=0.01,
        countdown_seconds=3,
        countdown_tick_seconds=0.01,
        default_language="en",
        environment="test",
    )


@pytest.fixture
def api_client() -> FakeShowApiClient:
    return FakeShowApiClient()


@pytest.fixture
def container(settings: Settings, api_client: FakeShowApiClient) -> AppContainer:
    return build_container(settings, api_client=api_client)
