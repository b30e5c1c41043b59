"""Dependency container wiring for the console."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from show_console.adapters.show_api_client import HttpxShowApiClient, ShowApiClient
from show_console.api.views import (
    AssignUsersView,
    Banner,
    CapturePhotoView,
    CreateShowView,
    EditShowView,
    ShowPlaybackView,
)
from show_console.config import Settings, parse_language
from show_console.services.assignments import AssignmentService
from show_console.services.capture import CaptureSessionTracker
from show_console.services.playback import Countdown, PlaybackSequencer
from show_console.services.shows import ShowBoard


@dataclass
class AppContainer:
    """Holds console-wide dependencies and per-view state."""

    settings: Settings
    api_client: ShowApiClient
    create_show_view: CreateShowView
    assign_users_view: AssignUsersView
    edit_show_view: EditShowView
    show_playback_view: ShowPlaybackView
    capture_photo_view: CapturePhotoView
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, api_client: ShowApiClient | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    http_client: HttpxShowApiClient | None = None
    if api_client is None:
        http_client = HttpxShowApiClient.create(
            resolved_settings.show_api_url,
            timeout=resolved_settings.request_timeout_seconds,
        )
        api_client = http_client
    debug = resolved_settings.environment == "local"

    sequencer = PlaybackSequencer(
        client=api_client,
        board=ShowBoard(),
        countdown=Countdown(
            duration_seconds=resolved_settings.countdown_seconds,
            tick_seconds=resolved_settings.countdown_tick_seconds,
        ),
        language=parse_language(resolved_settings.default_language) or "es",
    )
    tracker = CaptureSessionTracker(
        client=api_client,
        poll_interval_seconds=resolved_settings.photo_poll_interval_seconds,
    )
    show_playback_view = ShowPlaybackView(
        client=api_client, sequencer=sequencer, banner=Banner(debug=debug)
    )
    capture_photo_view = CapturePhotoView(tracker=tracker, banner=Banner(debug=debug))

    async def close_resources() -> None:
        await capture_photo_view.close()
        await show_playback_view.close()
        if http_client is not None:
            await http_client.close()

    return AppContainer(
        settings=resolved_settings,
        api_client=api_client,
        create_show_view=CreateShowView(client=api_client, banner=Banner(debug=debug)),
        assign_users_view=AssignUsersView(
            client=api_client,
            service=AssignmentService(api_client),
            banner=Banner(debug=debug),
        ),
        edit_show_view=EditShowView(client=api_client, banner=Banner(debug=debug)),
        show_playback_view=show_playback_view,
        capture_photo_view=capture_photo_view,
        close_resources=close_resources,
    )
