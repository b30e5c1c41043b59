"""Tests for the play/standby sequencer."""

import asyncio

import httpx
import pytest

from show_console.adapters.show_api_client import HttpxShowApiClient, ShowApiClient
from show_console.domain.errors import (
    InvalidRequestError,
    PlaybackStepError,
    ShowApiError,
)
from show_console.domain.shows import PLAYED_STATUS
from show_console.services.playback import Countdown, PlaybackSequencer
from show_console.services.shows import ShowBoard
from tests.conftest import FakeShowApiClient, make_participant, make_show


def _sequencer(
    client: ShowApiClient, board: ShowBoard | None = None
) -> PlaybackSequencer:
    return PlaybackSequencer(
        client=client,
        board=board or ShowBoard(),
        countdown=Countdown(duration_seconds=3, tick_seconds=0.01),
        language="en",
    )


def _client_with_show() -> tuple[FakeShowApiClient, ShowBoard]:
    client = FakeShowApiClient()
    show = make_show(
        "show-1", clients=[make_participant("u1"), make_participant("u2")]
    )
    other = make_show("show-2")
    client.shows = {show.id: show, other.id: other}
    return client, ShowBoard(shows=[show, other])


def test_play_runs_steps_in_order_and_marks_playing() -> None:
    client, board = _client_with_show()
    sequencer = _sequencer(client, board)

    async def scenario() -> None:
        updated = await sequencer.play("show-1", "es")
        assert updated.status == PLAYED_STATUS
        assert sequencer.playing
        assert sequencer.countdown.active
        await sequencer.close()

    asyncio.run(scenario())

    assert client.calls == [
        ("send_user_details", ("show-1",)),
        ("send_play_signal", ("show-1", ["u1", "u2"], "es")),
        ("update_show_status", ("show-1", PLAYED_STATUS)),
    ]
    assert [show.id for show in board.shows] == ["show-1", "show-2"]
    assert board.shows[0].status == PLAYED_STATUS
    assert sequencer.current_show_id == "show-1"


def test_play_signal_failure_leaves_state_unchanged() -> None:
    client, board = _client_with_show()
    client.failures["send_play_signal"] = ShowApiError("OSC bridge offline")
    sequencer = _sequencer(client, board)

    with pytest.raises(PlaybackStepError) as excinfo:
        asyncio.run(sequencer.play("show-1"))

    assert excinfo.value.step == "play_signal"
    assert "OSC bridge offline" in str(excinfo.value)
    assert not sequencer.playing
    assert not sequencer.countdown.active
    assert board.shows[0].status == "scheduled"
    assert "update_show_status" not in client.call_names()


def test_user_details_failure_aborts_remaining_steps() -> None:
    client, board = _client_with_show()
    client.failures["send_user_details"] = ShowApiError("Show not found")
    sequencer = _sequencer(client, board)

    with pytest.raises(PlaybackStepError) as excinfo:
        asyncio.run(sequencer.play("show-1"))

    assert excinfo.value.step == "user_details"
    assert client.call_names() == ["send_user_details"]
    assert not sequencer.playing


def test_status_update_failure_keeps_playing_false() -> None:
    client, board = _client_with_show()
    client.failures["update_show_status"] = ShowApiError("Database unavailable")
    sequencer = _sequencer(client, board)

    with pytest.raises(PlaybackStepError) as excinfo:
        asyncio.run(sequencer.play("show-1"))

    assert excinfo.value.step == "status_update"
    assert not sequencer.playing


def test_error_message_follows_language() -> None:
    client, board = _client_with_show()
    client.failures["send_play_signal"] = ShowApiError("timeout")
    sequencer = _sequencer(client, board)

    with pytest.raises(PlaybackStepError) as excinfo:
        asyncio.run(sequencer.play("show-1", "es"))

    assert str(excinfo.value) == "No se pudo enviar la señal de reproducción: timeout"


def test_invalid_language_is_rejected_before_any_request() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"ok": True})

    client = HttpxShowApiClient(
        base_url="https://backend.test/api",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    sequencer = _sequencer(client)

    with pytest.raises(PlaybackStepError) as excinfo:
        asyncio.run(sequencer.play("show-1", "fr"))

    assert excinfo.value.step == "play_signal"
    assert isinstance(excinfo.value.__cause__, InvalidRequestError)
    assert seen == []
    assert not sequencer.playing


def test_unsupported_language_sends_nothing() -> None:
    client, board = _client_with_show()
    sequencer = _sequencer(client, board)

    with pytest.raises(PlaybackStepError) as excinfo:
        asyncio.run(sequencer.play("show-1", "fr"))

    assert excinfo.value.step == "play_signal"
    assert str(excinfo.value) == "Could not send the play signal: Invalid language: fr"
    assert client.calls == []
    assert not sequencer.playing
    assert board.shows[0].status == "scheduled"


def test_language_code_is_normalized() -> None:
    client, board = _client_with_show()
    sequencer = _sequencer(client, board)

    async def scenario() -> None:
        await sequencer.play("show-1", " ES ")
        await sequencer.close()

    asyncio.run(scenario())

    assert client.calls[1] == ("send_play_signal", ("show-1", ["u1", "u2"], "es"))


def test_countdown_expires_without_side_effects() -> None:
    client, board = _client_with_show()
    sequencer = _sequencer(client, board)

    async def scenario() -> None:
        await sequencer.play("show-1")
        assert sequencer.countdown.remaining == 3
        await asyncio.sleep(0.1)
        assert sequencer.countdown.remaining == 0
        assert not sequencer.countdown.active
        await sequencer.close()

    asyncio.run(scenario())

    assert sequencer.playing
    assert "send_standby_signal" not in client.call_names()


def test_standby_resets_playing_and_cancels_countdown() -> None:
    client, board = _client_with_show()
    sequencer = _sequencer(client, board)
    sequencer.countdown = Countdown(duration_seconds=200, tick_seconds=1.0)

    async def scenario() -> None:
        await sequencer.play("show-1")
        assert sequencer.countdown.active
        await sequencer.standby()
        assert not sequencer.countdown.active
        assert sequencer.countdown._task is None

    asyncio.run(scenario())

    assert not sequencer.playing
    assert sequencer.current_show_id is None
    assert client.calls[-1] == ("send_standby_signal", ("show-1",))


def test_standby_failure_keeps_playing() -> None:
    client, board = _client_with_show()
    sequencer = _sequencer(client, board)
    client.failures["send_standby_signal"] = ShowApiError("OSC bridge offline")

    async def scenario() -> None:
        await sequencer.play("show-1")
        with pytest.raises(PlaybackStepError) as excinfo:
            await sequencer.standby("show-1")
        assert excinfo.value.step == "standby"
        assert sequencer.playing
        await sequencer.close()

    asyncio.run(scenario())


def test_standby_without_show_is_rejected() -> None:
    client = FakeShowApiClient()
    sequencer = _sequencer(client)

    with pytest.raises(InvalidRequestError):
        asyncio.run(sequencer.standby())

    assert client.calls == []
