# impostor/views.py
"""
Per-player projection of a room.

This is the only place that turns a player's impostor flag into something a
client can see, and it only ever does so for the player asking.
"""
from impostor.models import Player, Room

IMPOSTOR_WORD = "IMPOSTOR"


def roster_entry(player: Player) -> dict:
    return {
        "id": player.player_id,
        "name": player.name,
        "isHost": player.is_host,
        "isConnected": player.is_connected,
    }


def player_view(room: Room, player: Player) -> dict:
    """Build what `player` is allowed to see of `room`."""
    if player.is_impostor:
        player_word = {"word": IMPOSTOR_WORD, "isImpostor": True}
    elif room.current_word is not None:
        player_word = {"word": room.current_word, "isImpostor": False}
    else:
        player_word = None

    return {
        "roomId": room.room_id,
        "roomName": room.name,
        "status": room.status.value,
        "currentPhase": room.phase.value,
        "currentRound": room.current_round,
        "currentTheme": room.current_theme,
        "playerWord": player_word,
        "players": [roster_entry(p) for p in room.players],
        "playerId": player.player_id,
        "isHost": player.is_host,
        "lastUpdated": room.updated_at.isoformat() if room.updated_at else None,
    }
