# impostor/routes/rooms.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from impostor.errors import GameError
from impostor.game_manager import GameManager
from impostor.models import LeaveOutcome
from impostor.routes.common import fail, get_game_manager, ok
from impostor.schemas import (
    CreateRoomRequest,
    HeartbeatRequest,
    HostCommandRequest,
    JoinRoomRequest,
    LeaveRoomRequest,
    ThemeCommandRequest,
)
from impostor.themes import list_themes

router = APIRouter()


@router.get("/themes")
def get_themes():
    return ok({"themes": [t.to_dict() for t in list_themes()]})


@router.get("/rooms")
def get_rooms(manager: GameManager = Depends(get_game_manager)):
    try:
        rooms = manager.list_rooms()
    except GameError as e:
        return fail(e)
    return ok({"rooms": [r.to_dict() for r in rooms], "total": len(rooms)})


@router.post("/rooms")
def create_room(req: CreateRoomRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        room = manager.create_room(req.player_name)
    except GameError as e:
        return fail(e)
    return ok({"room": room.to_dict(), "playerId": room.host_id}, "Room created")


@router.get("/rooms/{room_id}")
def get_room(room_id: str, manager: GameManager = Depends(get_game_manager)):
    try:
        room = manager.get_room(room_id)
    except GameError as e:
        return fail(e)
    return ok({"room": room.to_dict()})


@router.post("/rooms/{room_id}/join")
def join_room(room_id: str, req: JoinRoomRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        player = manager.join_room(room_id, req.player_name)
    except GameError as e:
        return fail(e)
    return ok({"roomId": room_id, "player": player.to_dict()}, f"{player.name} joined the room")


@router.post("/rooms/{room_id}/leave")
def leave_room(room_id: str, req: LeaveRoomRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        outcome = manager.remove_player(room_id, req.player_id)
    except GameError as e:
        return fail(e)

    if outcome == LeaveOutcome.HOST_LEFT:
        return ok(
            {"action": outcome.value, "redirectTo": "/"},
            "The host left the room. The room has been deleted.",
        )

    try:
        room_info = manager.get_room_summary(room_id)
    except GameError as e:
        return fail(e)
    who = req.player_name or "A player"
    return ok({"action": outcome.value, "roomInfo": room_info}, f"{who} left the room")


@router.post("/rooms/{room_id}/heartbeat")
def heartbeat(room_id: str, req: HeartbeatRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        player = manager.heartbeat(room_id, req.player_id)
    except GameError as e:
        return fail(e)
    return ok({"player": player.to_dict()})


@router.post("/rooms/{room_id}/start-game")
def start_game(room_id: str, req: ThemeCommandRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        room = manager.start_game(room_id, req.host_id, req.theme_id)
    except GameError as e:
        return fail(e)
    return ok({"room": room.to_dict()}, "Game started")


@router.post("/rooms/{room_id}/change-theme")
def change_theme(room_id: str, req: ThemeCommandRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        room = manager.change_theme(room_id, req.host_id, req.theme_id)
    except GameError as e:
        return fail(e)
    return ok({"room": room.to_dict()}, "Theme changed")


@router.post("/rooms/{room_id}/generate-word")
def generate_word(room_id: str, req: HostCommandRequest, manager: GameManager = Depends(get_game_manager)):
    # The host may be an impostor too, so they get their own view rather than the word
    try:
        manager.generate_word(room_id, req.host_id)
        room = manager.get_room(room_id)
        host_view = manager.get_player_view(room_id, req.host_id)
    except GameError as e:
        return fail(e)
    return ok({"room": room.to_dict(), "playerState": host_view}, "New word generated")


@router.post("/rooms/{room_id}/next-round")
def next_round(room_id: str, req: HostCommandRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        room = manager.next_round(room_id, req.host_id)
    except GameError as e:
        return fail(e)
    return ok({"room": room.to_dict()}, f"Round {room.current_round}")


@router.post("/rooms/{room_id}/end-round")
def end_round(room_id: str, req: HostCommandRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        room = manager.end_round(room_id, req.host_id)
    except GameError as e:
        return fail(e)
    return ok({"room": room.to_dict()}, "Round ended")


@router.post("/rooms/{room_id}/end-game")
def end_game(room_id: str, req: HostCommandRequest, manager: GameManager = Depends(get_game_manager)):
    try:
        room = manager.end_game(room_id, req.host_id)
    except GameError as e:
        return fail(e)
    return ok({"room": room.to_dict()}, "Game over")


@router.get("/rooms/{room_id}/player-state")
def player_state(
    room_id: str,
    player_id: Optional[str] = Query(default=None, alias="playerId"),
    manager: GameManager = Depends(get_game_manager),
):
    try:
        view = manager.get_player_view(room_id, player_id)
    except GameError as e:
        return fail(e)
    return ok({"gameState": view})
