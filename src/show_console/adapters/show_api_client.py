"""HTTP client for the show-management backend."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

import httpx

from show_console.config import SUPPORTED_LANGUAGES
from show_console.domain.errors import InvalidRequestError, ShowApiError
from show_console.domain.photos import CaptureResult, Photo
from show_console.domain.shows import (
    DEFAULT_SHOW_DURATION_MINUTES,
    Participant,
    Show,
    format_timestamp,
)

_logger = logging.getLogger(__name__)


class ShowApiClient(Protocol):
    """Interface for backend show, user, photo and signal endpoints."""

    async def create_show(
        self, start_time: datetime, duration: int = DEFAULT_SHOW_DURATION_MINUTES
    ) -> Show:
        """Schedule a show and return it."""

    async def fetch_waiting_users(self) -> list[Participant]:
        """Return users waiting for a show."""

    async def fetch_available_shows(self) -> list[Show]:
        """Return shows that can still be assigned or played."""

    async def fetch_show(self, show_id: str) -> Show:
        """Return a show by id."""

    async def update_show(self, show_id: str, fields: dict[str, object]) -> Show:
        """Patch show fields and return the updated show."""

    async def assign_user_to_show(self, user_id: str, show_id: str) -> None:
        """Assign a single user to a show."""

    async def capture_photo(
        self, session_id: str | None, show_id: str | None, user_ids: list[str]
    ) -> CaptureResult:
        """Trigger a capture, creating the session on first use."""

    async def fetch_photos(self, session_id: str) -> list[Photo]:
        """Return the photos captured for a session."""

    async def approve_photo(self, session_id: str, photo_id: str) -> None:
        """Approve a photo, closing the capture session."""

    async def send_user_details(self, show_id: str) -> list[Participant]:
        """Forward a show's participant details to the signalling endpoint."""

    async def send_play_signal(
        self, show_id: str, user_ids: list[str], language: str
    ) -> None:
        """Send the play signal for a show."""

    async def send_standby_signal(self, show_id: str) -> None:
        """Send the standby signal for a show."""

    async def update_show_status(self, show_id: str, status: str) -> Show:
        """Update a show's status and return the updated show."""

    async def remove_user_from_show(self, show_id: str, user_id: str) -> None:
        """Remove a participant from a show."""

    async def delete_show(self, show_id: str) -> None:
        """Delete a show."""


@dataclass
class HttpxShowApiClient:
    """Show backend client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 10.0) -> "HttpxShowApiClient":
        """Create a backend client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def create_show(
        self, start_time: datetime, duration: int = DEFAULT_SHOW_DURATION_MINUTES
    ) -> Show:
        """Schedule a show starting at start_time."""
        payload = await self._request(
            "POST",
            "/shows",
            fallback="Failed to schedule show",
            json={"startTime": format_timestamp(start_time), "duration": duration},
        )
        return Show.model_validate(_unwrap(payload, "show"))

    async def fetch_waiting_users(self) -> list[Participant]:
        """Fetch users waiting to be assigned."""
        payload = await self._request(
            "GET", "/users/waiting", fallback="Failed to fetch users"
        )
        return [Participant.model_validate(item) for item in _unwrap_list(payload)]

    async def fetch_available_shows(self) -> list[Show]:
        """Fetch shows that are still available."""
        payload = await self._request(
            "GET", "/shows/available", fallback="Failed to fetch shows"
        )
        return [Show.model_validate(item) for item in _unwrap_list(payload)]

    async def fetch_show(self, show_id: str) -> Show:
        """Fetch a single show."""
        payload = await self._request(
            "GET", f"/shows/{show_id}", fallback="Failed to fetch show"
        )
        return Show.model_validate(_unwrap(payload, "show"))

    async def update_show(self, show_id: str, fields: dict[str, object]) -> Show:
        """Patch show fields."""
        payload = await self._request(
            "PATCH",
            f"/shows/{show_id}",
            fallback="Failed to update show",
            json=fields,
        )
        return Show.model_validate(_unwrap(payload, "show"))

    async def assign_user_to_show(self, user_id: str, show_id: str) -> None:
        """Assign a user to a show."""
        await self._request(
            "PATCH",
            f"/users/{user_id}/show",
            fallback="Failed to assign user to show",
            json={"showId": show_id},
        )

    async def capture_photo(
        self, session_id: str | None, show_id: str | None, user_ids: list[str]
    ) -> CaptureResult:
        """Trigger a photo capture."""
        payload = await self._request(
            "POST",
            "/photos/capture",
            fallback="Failed to capture photo",
            json={
                "sessionId": session_id,
                "showId": show_id,
                "userIds": user_ids,
                "timestamp": format_timestamp(datetime.now(tz=UTC)),
            },
        )
        return CaptureResult.model_validate(payload)

    async def fetch_photos(self, session_id: str) -> list[Photo]:
        """Fetch photos for a capture session."""
        payload = await self._request(
            "GET",
            "/photos",
            fallback="Failed to fetch photos",
            params={"sessionId": session_id},
        )
        photos = payload.get("photos") if isinstance(payload, dict) else payload
        return [Photo.model_validate(item) for item in photos or []]

    async def approve_photo(self, session_id: str, photo_id: str) -> None:
        """Approve a captured photo."""
        await self._request(
            "POST",
            "/photos/approve",
            fallback="Failed to approve photo",
            json={"sessionId": session_id, "photoId": photo_id},
        )

    async def send_user_details(self, show_id: str) -> list[Participant]:
        """Fetch the show and forward its participants to the signal endpoint."""
        show = await self.fetch_show(show_id)
        await self._request(
            "POST",
            "/osc/send-users",
            fallback="Failed to send user details",
            json={
                "showId": show_id,
                "users": [client.model_dump() for client in show.clients],
            },
        )
        return show.clients

    async def send_play_signal(
        self, show_id: str, user_ids: list[str], language: str
    ) -> None:
        """Send the play signal after validating its inputs."""
        if not show_id:
            raise InvalidRequestError("Show id is required")
        if not isinstance(user_ids, list):
            raise InvalidRequestError("User ids must be a list")
        if language not in SUPPORTED_LANGUAGES:
            raise InvalidRequestError(f"Invalid language: {language}")
        await self._request(
            "POST",
            "/osc/play",
            fallback="Failed to send play signal",
            json={"showId": show_id, "userIds": user_ids, "language": language},
        )

    async def send_standby_signal(self, show_id: str) -> None:
        """Send the standby signal."""
        await self._request(
            "POST",
            "/osc/standby",
            fallback="Failed to send standby signal",
            json={"showId": show_id},
        )

    async def update_show_status(self, show_id: str, status: str) -> Show:
        """Update the status of a show."""
        payload = await self._request(
            "PATCH",
            f"/shows/{show_id}/status",
            fallback="Failed to update show status",
            json={"status": status},
        )
        return Show.model_validate(_unwrap(payload, "show"))

    async def remove_user_from_show(self, show_id: str, user_id: str) -> None:
        """Remove a user from a show."""
        await self._request(
            "PATCH",
            f"/shows/{show_id}/remove-user/{user_id}",
            fallback="Failed to remove user from show",
        )

    async def delete_show(self, show_id: str) -> None:
        """Delete a show."""
        await self._request(
            "DELETE", f"/shows/{show_id}", fallback="Failed to delete show"
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        json: object | None = None,
        params: dict[str, str] | None = None,
    ) -> object:
        """Issue one request and translate failures into ShowApiError."""
        url = f"{self.base_url}{path}"
        try:
            response = await self.http_client.request(
                method, url, json=json, params=params, timeout=self.timeout
            )
        except httpx.TransportError as exc:
            _logger.warning("%s %s failed: %s", method, path, exc)
            raise ShowApiError(fallback) from exc

        if response.is_error:
            message = _error_message(response) or fallback
            _logger.warning(
                "%s %s returned %s: %s", method, path, response.status_code, message
            )
            raise ShowApiError(message, status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise ShowApiError(fallback, status_code=response.status_code) from exc


def _error_message(response: httpx.Response) -> str | None:
    """Return the server-supplied error message, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def _unwrap(payload: object, key: str) -> object:
    """Return payload[key] when the backend wraps the entity."""
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    return payload


def _unwrap_list(payload: object) -> list[object]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for value in payload.values():
            if isinstance(value, list):
                return value
    return []

