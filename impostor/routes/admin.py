# impostor/routes/admin.py
from fastapi import APIRouter, Depends

from impostor import config
from impostor.errors import GameError
from impostor.game_manager import GameManager
from impostor.routes.common import fail, get_game_manager, ok

router = APIRouter(prefix="/admin")


@router.post("/cleanup-orphaned-rooms")
def cleanup_orphaned_rooms(manager: GameManager = Depends(get_game_manager)):
    try:
        deleted = manager.cleanup_orphaned_rooms()
    except GameError as e:
        return fail(e)
    return ok({"deletedCount": deleted}, f"Cleanup finished, {deleted} orphaned rooms deleted")


@router.post("/cleanup-rooms")
def cleanup_rooms(manager: GameManager = Depends(get_game_manager)):
    try:
        summary = manager.run_cleanup(config.STALE_ROOM_MINUTES, config.DISCONNECT_TIMEOUT_SECONDS)
    except GameError as e:
        return fail(e)
    return ok({"summary": summary}, "Cleanup finished")
