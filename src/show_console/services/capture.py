"""Photo capture session tracking with background polling."""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field

from show_console.adapters.show_api_client import ShowApiClient
from show_console.domain.errors import (
    CaptureLimitError,
    InvalidRequestError,
    ShowConsoleError,
)
from show_console.domain.photos import CaptureResult, Photo

MAX_CAPTURE_ATTEMPTS = 3

_logger = logging.getLogger(__name__)


@dataclass
class CaptureSessionTracker:
    """State machine over one capture session: idle, then active until approval.

    While a session is active a background task refreshes the photo list every
    ``poll_interval_seconds``. The task is cancelled on approval and on
    ``close()``; use the tracker as an async context manager to tie it to a
    view's lifetime.
    """

    client: ShowApiClient
    poll_interval_seconds: float = 3.0
    max_attempts: int = MAX_CAPTURE_ATTEMPTS
    session_id: str | None = None
    show_id: str | None = None
    user_ids: list[str] = field(default_factory=list)
    photos: list[Photo] = field(default_factory=list)
    attempts: int = 0
    selected_photo_id: str | None = None
    last_poll_error: str | None = None
    capturing: bool = False
    _poll_task: "asyncio.Task[None] | None" = field(
        default=None, init=False, repr=False
    )

    async def __aenter__(self) -> "CaptureSessionTracker":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def state(self) -> str:
        return "active" if self.session_id is not None else "idle"

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def can_capture(self) -> bool:
        return not self.capturing and self.attempts < self.max_attempts

    @property
    def can_approve(self) -> bool:
        return self.session_id is not None and self.selected_photo_id is not None

    async def capture(
        self, show_id: str | None = None, user_ids: list[str] | None = None
    ) -> CaptureResult:
        """Take another photo, opening the session on the first attempt.

        Only one capture runs at a time; overlapping calls are rejected.
        """
        if self.capturing:
            raise InvalidRequestError("A capture is already in progress")
        if self.attempts >= self.max_attempts:
            raise CaptureLimitError(
                f"Maximum of {self.max_attempts} capture attempts reached"
            )
        if show_id is not None:
            self.show_id = show_id
        if user_ids is not None:
            self.user_ids = list(user_ids)

        self.capturing = True
        try:
            result = await self.client.capture_photo(
                self.session_id, self.show_id, self.user_ids
            )
            if self.session_id is None:
                self.session_id = result.session_id
                self._start_polling()
                _logger.info("Capture session %s started", self.session_id)
            self.attempts += 1
            await self._refresh_recording_errors()
        finally:
            self.capturing = False
        return result

    async def refresh(self) -> list[Photo]:
        """Fetch the session's photos and replace the local list."""
        session_id = self.session_id
        if session_id is None:
            return self.photos
        photos = await self.client.fetch_photos(session_id)
        if self.session_id == session_id:
            self.photos = photos
            if not any(photo.id == self.selected_photo_id for photo in photos):
                self.selected_photo_id = None
        return photos

    def select(self, photo_id: str) -> None:
        """Mark exactly one photo as selected."""
        if not any(photo.id == photo_id for photo in self.photos):
            raise InvalidRequestError(f"Unknown photo: {photo_id}")
        self.selected_photo_id = photo_id

    async def approve(self) -> str:
        """Approve the selected photo and end the session."""
        if self.session_id is None or self.selected_photo_id is None:
            raise InvalidRequestError("Select a photo to approve")
        session_id = self.session_id
        photo_id = self.selected_photo_id
        await self.client.approve_photo(session_id, photo_id)
        await self.close()
        _logger.info("Capture session %s approved photo %s", session_id, photo_id)
        return photo_id

    async def close(self) -> None:
        """Stop polling and discard all session state."""
        await self._stop_polling()
        self.session_id = None
        self.photos = []
        self.attempts = 0
        self.selected_photo_id = None
        self.last_poll_error = None

    def _start_polling(self) -> None:
        if self.is_polling:
            return
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def _stop_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval_seconds)
            await self._refresh_recording_errors()

    async def _refresh_recording_errors(self) -> None:
        try:
            await self.refresh()
        except ShowConsoleError as exc:
            _logger.warning(
                "Photo refresh failed for session %s: %s", self.session_id, exc
            )
            self.last_poll_error = str(exc)
        else:
            self.last_poll_error = None
