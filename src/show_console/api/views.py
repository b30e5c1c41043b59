"""Per-view console state with success and error banners."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

from show_console.adapters.show_api_client import ShowApiClient
from show_console.domain.errors import InvalidRequestError, ShowConsoleError
from show_console.domain.shows import Participant, Show
from show_console.services.assignments import AssignmentSelection, AssignmentService
from show_console.services.capture import CaptureSessionTracker
from show_console.services.playback import PlaybackSequencer
from show_console.services.shows import ShowBoard

_logger = logging.getLogger(__name__)


@dataclass
class Banner:
    """Mutually exclusive success and error messages shown on a view."""

    error: str | None = None
    success: str | None = None
    debug: bool = False

    def clear(self) -> None:
        self.error = None
        self.success = None

    def fail(self, message: str) -> None:
        self.error = message
        self.success = None

    def succeed(self, message: str) -> None:
        self.success = message
        self.error = None

    async def guard(self, action: str, func: Callable[[], Awaitable[object]]) -> bool:
        """Run a view action, turning any failure into an error banner."""
        self.clear()
        try:
            await func()
        except ShowConsoleError as exc:
            _logger.warning("%s failed: %s", action, exc)
            self.fail(str(exc))
            return False
        except Exception as exc:
            _logger.exception("%s failed unexpectedly", action)
            self.fail(_format_unexpected(action, exc, self.debug))
            return False
        return True

    def to_dict(self) -> dict[str, str | None]:
        return {"error": self.error, "success": self.success}


@dataclass
class CreateShowView:
    """Schedule new shows."""

    client: ShowApiClient
    banner: Banner = field(default_factory=Banner)
    last_created: Show | None = None

    async def create(self, start_time: datetime) -> dict[str, object]:
        async def action() -> None:
            show = await self.client.create_show(start_time)
            self.last_created = show
            self.banner.succeed(
                "Show scheduled successfully!\n"
                f"Start: {show.start_time_formatted}\n"
                f"End: {show.end_time_formatted}"
            )

        await self.banner.guard("Create show", action)
        return self.snapshot()

    def snapshot(self) -> dict[str, object]:
        return {
            **self.banner.to_dict(),
            "show": _show_dict(self.last_created) if self.last_created else None,
        }


@dataclass
class AssignUsersView:
    """Select waiting users and assign them to a show."""

    client: ShowApiClient
    service: AssignmentService
    banner: Banner = field(default_factory=Banner)
    selection: AssignmentSelection = field(default_factory=AssignmentSelection)
    users: list[Participant] = field(default_factory=list)
    board: ShowBoard = field(default_factory=ShowBoard)

    async def load(self) -> dict[str, object]:
        async def action() -> None:
            await self._reload()

        if not await self.banner.guard("Load assignment data", action):
            self.banner.fail("Failed to load data")
        return self.snapshot()

    async def toggle_user(self, user_id: str) -> dict[str, object]:
        async def action() -> None:
            user = next((user for user in self.users if user.id == user_id), None)
            if user is None:
                raise InvalidRequestError(f"Unknown user: {user_id}")
            self.selection.toggle_user(user)

        await self.banner.guard("Toggle user", action)
        return self.snapshot()

    async def select_show(self, show_id: str) -> dict[str, object]:
        async def action() -> None:
            show = self.board.get(show_id)
            if show is None:
                raise InvalidRequestError(f"Unknown show: {show_id}")
            self.selection.select_show(show)

        await self.banner.guard("Select show", action)
        return self.snapshot()

    async def confirm(self) -> dict[str, object]:
        async def action() -> None:
            count = await self.service.confirm(self.selection)
            self.banner.succeed(f"Successfully assigned {count} user(s) to the show")
            await self._reload()

        await self.banner.guard("Assign users", action)
        return self.snapshot()

    async def _reload(self) -> None:
        self.users = await self.client.fetch_waiting_users()
        self.board.replace(await self.client.fetch_available_shows())

    def snapshot(self) -> dict[str, object]:
        return {
            **self.banner.to_dict(),
            "users": [user.model_dump() for user in self.users],
            "shows": [_show_dict(show) for show in self.board.shows],
            "selected_user_ids": [user.id for user in self.selection.users],
            "selected_show_id": (
                self.selection.show.id if self.selection.show else None
            ),
        }


@dataclass
class EditShowView:
    """Inspect, update and delete shows."""

    client: ShowApiClient
    banner: Banner = field(default_factory=Banner)
    board: ShowBoard = field(default_factory=ShowBoard)
    selected_show_id: str | None = None

    async def load(self) -> dict[str, object]:
        async def action() -> None:
            self.board.replace(await self.client.fetch_available_shows())

        await self.banner.guard("Load shows", action)
        return self.snapshot()

    async def select(self, show_id: str) -> dict[str, object]:
        async def action() -> None:
            if self.board.get(show_id) is None:
                raise InvalidRequestError(f"Unknown show: {show_id}")
            self.selected_show_id = show_id

        await self.banner.guard("Select show", action)
        return self.snapshot()

    async def update(
        self, show_id: str, fields: dict[str, object]
    ) -> dict[str, object]:
        async def action() -> None:
            updated = await self.client.update_show(show_id, fields)
            self.board.merge(updated)
            self.banner.succeed("Show updated successfully")

        await self.banner.guard("Update show", action)
        return self.snapshot()

    async def remove_user(self, show_id: str, user_id: str) -> dict[str, object]:
        async def action() -> None:
            await self.client.remove_user_from_show(show_id, user_id)
            self.board.remove_participant(show_id, user_id)
            self.banner.succeed("User removed successfully")

        await self.banner.guard("Remove user", action)
        return self.snapshot()

    async def delete(self, show_id: str) -> dict[str, object]:
        async def action() -> None:
            await self.client.delete_show(show_id)
            self.board.discard(show_id)
            if self.selected_show_id == show_id:
                self.selected_show_id = None
            self.banner.succeed("Show deleted successfully")

        await self.banner.guard("Delete show", action)
        return self.snapshot()

    def snapshot(self) -> dict[str, object]:
        selected = self.board.get(self.selected_show_id or "")
        return {
            **self.banner.to_dict(),
            "shows": [_show_dict(show) for show in self.board.shows],
            "selected_show": _show_dict(selected) if selected else None,
        }


@dataclass
class ShowPlaybackView:
    """Trigger play and standby signals for shows."""

    client: ShowApiClient
    sequencer: PlaybackSequencer
    banner: Banner = field(default_factory=Banner)

    async def load(self) -> dict[str, object]:
        async def action() -> None:
            self.sequencer.board.replace(await self.client.fetch_available_shows())

        await self.banner.guard("Load shows", action)
        return self.snapshot()

    async def play(self, show_id: str, language: str | None) -> dict[str, object]:
        async def action() -> None:
            show = await self.sequencer.play(show_id, language)
            self.banner.succeed(f"Show {show.id} is playing")

        await self.banner.guard("Play show", action)
        return self.snapshot()

    async def standby(self, show_id: str | None) -> dict[str, object]:
        async def action() -> None:
            await self.sequencer.standby(show_id)
            self.banner.succeed("Standby signal sent")

        await self.banner.guard("Standby", action)
        return self.snapshot()

    async def close(self) -> None:
        await self.sequencer.close()

    def snapshot(self) -> dict[str, object]:
        countdown = self.sequencer.countdown
        return {
            **self.banner.to_dict(),
            "shows": [_show_dict(show) for show in self.sequencer.board.shows],
            "playing": self.sequencer.playing,
            "current_show_id": self.sequencer.current_show_id,
            "countdown_active": countdown.active,
            "countdown_remaining": countdown.remaining,
        }


@dataclass
class CapturePhotoView:
    """Capture, select and approve photos for a show."""

    tracker: CaptureSessionTracker
    banner: Banner = field(default_factory=Banner)

    async def capture(
        self, show_id: str | None, user_ids: list[str] | None
    ) -> dict[str, object]:
        async def action() -> None:
            await self.tracker.capture(show_id, user_ids)

        await self.banner.guard("Capture photo", action)
        return self.snapshot()

    async def select(self, photo_id: str) -> dict[str, object]:
        async def action() -> None:
            self.tracker.select(photo_id)

        await self.banner.guard("Select photo", action)
        return self.snapshot()

    async def approve(self) -> dict[str, object]:
        async def action() -> None:
            await self.tracker.approve()
            self.banner.succeed("Photo approved")

        await self.banner.guard("Approve photo", action)
        return self.snapshot()

    async def close(self) -> dict[str, object]:
        await self.tracker.close()
        self.banner.clear()
        return self.snapshot()

    def snapshot(self) -> dict[str, object]:
        tracker = self.tracker
        return {
            **self.banner.to_dict(),
            "state": tracker.state,
            "session_id": tracker.session_id,
            "show_id": tracker.show_id,
            "photos": [photo.model_dump() for photo in tracker.photos],
            "attempts": tracker.attempts,
            "capturing": tracker.capturing,
            "max_attempts": tracker.max_attempts,
            "selected_photo_id": tracker.selected_photo_id,
            "can_capture": tracker.can_capture,
            "can_approve": tracker.can_approve,
            "poll_error": tracker.last_poll_error,
        }


def _show_dict(show: Show) -> dict[str, object]:
    return {
        "id": show.id,
        "start_time": show.start_time_formatted,
        "end_time": show.end_time_formatted,
        "duration": show.duration,
        "status": show.status,
        "clients": [client.model_dump() for client in show.clients],
        "remaining_capacity": show.remaining_capacity,
    }


def _format_unexpected(action: str, exc: Exception, debug: bool) -> str:
    """Return a user-facing error with optional debug detail."""
    fallback = f"{action} failed. Please try again."
    if debug:
        detail = f"{type(exc).__name__}: {exc}".strip()
        return f"{fallback} (debug: {detail})"
    return fallback
