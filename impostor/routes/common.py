# impostor/routes/common.py
from fastapi import Request
from fastapi.responses import JSONResponse

from impostor.errors import GameError
from impostor.game_manager import GameManager


def get_game_manager(request: Request) -> GameManager:
    """The manager is built once by the app and shared by every request."""
    return request.app.state.game_manager


def ok(data=None, message=None) -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def fail(error: GameError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": str(error)},
    )
