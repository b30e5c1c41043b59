"""Play and standby sequencing for a show."""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from show_console.adapters.show_api_client import ShowApiClient
from show_console.config import parse_language
from show_console.domain.errors import InvalidRequestError, PlaybackStepError
from show_console.domain.shows import PLAYED_STATUS, Show
from show_console.services.shows import ShowBoard

STEP_USER_DETAILS = "user_details"
STEP_PLAY_SIGNAL = "play_signal"
STEP_STATUS_UPDATE = "status_update"
STEP_STANDBY = "standby"

_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        STEP_USER_DETAILS: "Could not send participant details",
        STEP_PLAY_SIGNAL: "Could not send the play signal",
        STEP_STATUS_UPDATE: "Could not update the show status",
        STEP_STANDBY: "Could not send the standby signal",
    },
    "es": {
        STEP_USER_DETAILS: "No se pudieron enviar los datos de los participantes",
        STEP_PLAY_SIGNAL: "No se pudo enviar la señal de reproducción",
        STEP_STATUS_UPDATE: "No se pudo actualizar el estado del show",
        STEP_STANDBY: "No se pudo enviar la señal de standby",
    },
}

_T = TypeVar("_T")

_logger = logging.getLogger(__name__)


@dataclass
class Countdown:
    """Client-side countdown shown while a show plays."""

    duration_seconds: int = 200
    tick_seconds: float = 1.0
    remaining: int = 0
    _task: "asyncio.Task[None] | None" = field(default=None, init=False, repr=False)

    @property
    def active(self) -> bool:
        return self.remaining > 0

    async def start(self) -> None:
        """Restart the countdown from the full window."""
        await self.stop()
        self.remaining = self.duration_seconds
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        self.remaining = 0
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while self.remaining > 0:
            await asyncio.sleep(self.tick_seconds)
            self.remaining -= 1


@dataclass
class PlaybackSequencer:
    """Run the ordered play protocol and the standby transition."""

    client: ShowApiClient
    board: ShowBoard
    countdown: Countdown = field(default_factory=Countdown)
    language: str = "es"
    playing: bool = False
    current_show_id: str | None = None

    async def play(self, show_id: str, language: str | None = None) -> Show:
        """Send details, send the play signal, then mark the show played.

        An unsupported language is rejected before any request. Each step must
        succeed before the next one runs; the first failure raises
        PlaybackStepError and leaves ``playing`` untouched.
        """
        requested = language or self.language
        language = parse_language(requested)
        if language is None:
            error = InvalidRequestError(f"Invalid language: {requested}")
            _logger.warning("Rejected play for show %s: %s", show_id, error)
            raise PlaybackStepError(
                STEP_PLAY_SIGNAL, _step_message(STEP_PLAY_SIGNAL, self.language, error)
            ) from error
        participants = await self._run_step(
            STEP_USER_DETAILS,
            show_id,
            language,
            lambda: self.client.send_user_details(show_id),
        )
        await self._run_step(
            STEP_PLAY_SIGNAL,
            show_id,
            language,
            lambda: self.client.send_play_signal(
                show_id, [participant.id for participant in participants], language
            ),
        )
        updated = await self._run_step(
            STEP_STATUS_UPDATE,
            show_id,
            language,
            lambda: self.client.update_show_status(show_id, PLAYED_STATUS),
        )
        self.board.merge(updated)
        self.playing = True
        self.current_show_id = show_id
        await self.countdown.start()
        _logger.info("Show %s playing (language=%s)", show_id, language)
        return updated

    async def standby(
        self, show_id: str | None = None, language: str | None = None
    ) -> None:
        """Send the standby signal and stop the playing state."""
        target = show_id or self.current_show_id
        if not target:
            raise InvalidRequestError("Show id is required")
        await self._run_step(
            STEP_STANDBY,
            target,
            language or self.language,
            lambda: self.client.send_standby_signal(target),
        )
        self.playing = False
        self.current_show_id = None
        await self.countdown.stop()
        _logger.info("Show %s on standby", target)

    async def close(self) -> None:
        """Cancel the countdown when the view goes away."""
        await self.countdown.stop()

    async def _run_step(
        self,
        step: str,
        show_id: str,
        language: str,
        func: Callable[[], Awaitable[_T]],
    ) -> _T:
        try:
            return await func()
        except Exception as exc:
            _logger.warning("Step %s failed for show %s: %s", step, show_id, exc)
            raise PlaybackStepError(step, _step_message(step, language, exc)) from exc


def _step_message(step: str, language: str, exc: Exception) -> str:
    """Build a localized error message for a failed step."""
    messages = _MESSAGES.get(language, _MESSAGES["en"])
    detail = str(exc).strip()
    if detail:
        return f"{messages[step]}: {detail}"
    return messages[step]
