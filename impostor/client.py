# impostor/client.py
"""
HTTP client for the impostor server, plus a poller that keeps a player's
view in sync by re-fetching it on a fixed interval.
"""
import logging
import threading
from typing import Callable, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ImpostorClient:
    """Thin wrapper over the JSON API. Every method returns the envelope's `data`."""

    def __init__(self, base_url: str = "http://localhost:8000", http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self):
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _call(self, method: str, path: str, **kwargs):
        response = self.http.request(method, path, **kwargs)
        try:
            body = response.json()
        except ValueError:
            raise ApiError(response.status_code, response.text or "Invalid response")
        if not body.get("success"):
            raise ApiError(response.status_code, body.get("error") or "Request failed")
        return body.get("data")

    def list_rooms(self):
        return self._call("GET", "/rooms")["rooms"]

    def create_room(self, player_name: str):
        return self._call("POST", "/rooms", json={"playerName": player_name})

    def get_room(self, room_id: str):
        return self._call("GET", f"/rooms/{room_id}")["room"]

    def join_room(self, room_id: str, player_name: str):
        return self._call("POST", f"/rooms/{room_id}/join", json={"playerName": player_name})["player"]

    def leave_room(self, room_id: str, player_id: str, player_name: Optional[str] = None):
        return self._call(
            "POST", f"/rooms/{room_id}/leave",
            json={"playerId": player_id, "playerName": player_name},
        )

    def start_game(self, room_id: str, host_id: str, theme_id: str):
        return self._call(
            "POST", f"/rooms/{room_id}/start-game",
            json={"hostId": host_id, "themeId": theme_id},
        )["room"]

    def change_theme(self, room_id: str, host_id: str, theme_id: str):
        return self._call(
            "POST", f"/rooms/{room_id}/change-theme",
            json={"hostId": host_id, "themeId": theme_id},
        )["room"]

    def generate_word(self, room_id: str, host_id: str):
        return self._call("POST", f"/rooms/{room_id}/generate-word", json={"hostId": host_id})

    def next_round(self, room_id: str, host_id: str):
        return self._call("POST", f"/rooms/{room_id}/next-round", json={"hostId": host_id})["room"]

    def player_state(self, room_id: str, player_id: str):
        return self._call(
            "GET", f"/rooms/{room_id}/player-state", params={"playerId": player_id},
        )["gameState"]


class RoomPoller:
    """
    Re-fetch a player's view every `interval` seconds.

    `on_change` is called with the new view whenever it differs from the last
    one. When the room disappears (the host left) `on_closed` is called and
    polling stops. Other errors are logged and polling carries on.
    """

    def __init__(
        self,
        client: ImpostorClient,
        room_id: str,
        player_id: str,
        on_change: Callable[[dict], None],
        on_closed: Optional[Callable[[], None]] = None,
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.client = client
        self.room_id = room_id
        self.player_id = player_id
        self.on_change = on_change
        self.on_closed = on_closed
        self.interval = interval
        self.last_view: Optional[dict] = None
        self.closed = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll_once(self) -> bool:
        """Fetch once. Returns False when polling should stop."""
        try:
            view = self.client.player_state(self.room_id, self.player_id)
        except ApiError as e:
            if e.status_code == 404:
                logger.info("Room %s is gone, stopping", self.room_id)
                self.closed = True
                if self.on_closed:
                    self.on_closed()
                return False
            logger.warning("Polling room %s failed: %s", self.room_id, e.message)
            return True
        except httpx.HTTPError as e:
            logger.warning("Polling room %s failed: %s", self.room_id, e)
            return True

        if view != self.last_view:
            self.last_view = view
            self.on_change(view)
        return True

    def run(self):
        while not self._stop.is_set():
            if not self.poll_once():
                break
            self._stop.wait(self.interval)

    def start(self):
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name=f"poll-{self.room_id}", daemon=True)
        self._thread.start()

    def stop(self):
        """Stop polling. Safe to call from `on_change` / `on_closed`."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()
