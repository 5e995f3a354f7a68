"""Tests for the API client and the polling sync loop."""
import threading

import httpx
import pytest

from impostor.client import ApiError, ImpostorClient, RoomPoller


def scripted_client(responses):
    """An ImpostorClient whose transport replays `responses` (status, body) in order."""
    calls = []
    queue = list(responses)

    def handler(request):
        calls.append(request)
        status, body = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(body, Exception):
            raise body
        return httpx.Response(status, json=body)

    http = httpx.Client(base_url="http://test", transport=httpx.MockTransport(handler))
    return ImpostorClient(http=http), calls


def state(phase, word=None):
    return {"success": True, "data": {"gameState": {"currentPhase": phase, "playerWord": word}}}


def test_client_against_app(client):
    api = ImpostorClient(http=client)
    created = api.create_room("Ana")
    room_id, host_id = created["room"]["id"], created["playerId"]
    beto = api.join_room(room_id, "Beto")
    api.start_game(room_id, host_id, "colors")
    api.generate_word(room_id, host_id)

    view = api.player_state(room_id, beto["id"])
    assert view["currentTheme"] == "colors"
    assert view["playerWord"]["word"]
    assert [r["id"] for r in api.list_rooms()] == []

    with pytest.raises(ApiError) as info:
        api.next_round(room_id, beto["id"])
    assert info.value.status_code == 400
    assert info.value.message == "Only the host can do that"


def test_poller_reports_only_changes():
    api, calls = scripted_client([
        (200, state("waiting")),
        (200, state("waiting")),
        (200, state("playing", {"word": "Red", "isImpostor": False})),
    ])
    seen = []
    poller = RoomPoller(api, "r1", "p1", on_change=seen.append)

    for _ in range(4):
        assert poller.poll_once() is True

    assert [v["currentPhase"] for v in seen] == ["waiting", "playing"]
    assert len(calls) == 4
    assert calls[0].url.params["playerId"] == "p1"
    assert calls[0].url.path == "/rooms/r1/player-state"


def test_poller_stops_when_room_is_gone():
    api, _ = scripted_client([
        (200, state("playing")),
        (404, {"success": False, "error": "Room not found"}),
    ])
    closed = []
    poller = RoomPoller(api, "r1", "p1", on_change=lambda v: None, on_closed=lambda: closed.append(True), interval=0)

    poller.run()

    assert closed == [True]
    assert poller.closed is True


def test_poller_survives_errors():
    api, _ = scripted_client([
        (500, {"success": False, "error": "Internal server error"}),
        (200, state("waiting")),
    ])
    seen = []
    poller = RoomPoller(api, "r1", "p1", on_change=seen.append)

    assert poller.poll_once() is True
    assert seen == []
    assert poller.poll_once() is True
    assert len(seen) == 1


def test_poller_survives_transport_errors():
    api, _ = scripted_client([
        (0, httpx.ConnectError("refused")),
        (200, state("waiting")),
    ])
    seen = []
    poller = RoomPoller(api, "r1", "p1", on_change=seen.append)
    assert poller.poll_once() is True
    assert poller.poll_once() is True
    assert len(seen) == 1


def test_poller_can_stop_itself_from_on_closed():
    api, _ = scripted_client([(404, {"success": False, "error": "Room not found"})])
    errors = []
    threads = []
    done = threading.Event()

    def on_closed():
        threads.append(threading.current_thread())
        try:
            poller.stop()
        except Exception as e:
            errors.append(repr(e))
        finally:
            done.set()

    poller = RoomPoller(api, "r1", "p1", on_change=lambda v: None, on_closed=on_closed, interval=0.01)
    poller.start()

    assert done.wait(5)
    threads[0].join(5)
    assert errors == []
    assert not threads[0].is_alive()
    assert poller._thread is None
    assert poller.closed is True


def test_poller_thread_can_be_stopped():
    api, _ = scripted_client([(200, state("waiting"))])
    poller = RoomPoller(api, "r1", "p1", on_change=lambda v: None, interval=0.01)
    poller.start()
    poller.stop()
    assert poller._thread is None
