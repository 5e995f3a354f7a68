# impostor/models.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from impostor.config import MAX_PLAYERS, MAX_ROUNDS


class RoomStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class GamePhase(str, Enum):
    WAITING = "waiting"
    THEME_SELECTION = "theme_selection"
    WORD_GENERATION = "word_generation"
    PLAYING = "playing"
    DISCUSSION = "discussion"  # reserved, never entered
    VOTING = "voting"  # reserved, never entered
    ROUND_END = "round_end"
    GAME_END = "game_end"


class ActionType(str, Enum):
    START_GAME = "start_game"
    CHANGE_THEME = "change_theme"
    GENERATE_WORD = "generate_word"
    NEXT_ROUND = "next_round"
    END_ROUND = "end_round"
    END_GAME = "end_game"


class LeaveOutcome(str, Enum):
    PLAYER_LEFT = "player_left"
    HOST_LEFT = "host_left"


class Player:
    """
    In-memory representation of a player.
    The impostor flag is kept here but never serialized by to_dict.
    """
    def __init__(self, player_id: str, name: str, is_host: bool = False):
        self.player_id = player_id
        self.name = name
        self.is_host = is_host
        self.is_impostor: bool = False
        self.is_connected: bool = True
        self.session_id: Optional[str] = None
        self.last_seen: Optional[datetime] = None

    def to_dict(self):
        """Convert player to dictionary for API responses"""
        return {
            "id": self.player_id,
            "name": self.name,
            "isHost": self.is_host,
            "isConnected": self.is_connected,
            "lastSeen": _iso(self.last_seen),
        }


class GameState:
    """Per-room game progress, mirrors the game_states row."""
    def __init__(self, room_id: str):
        self.room_id = room_id
        self.status: RoomStatus = RoomStatus.WAITING
        self.phase: GamePhase = GamePhase.WAITING
        self.current_round = 0
        self.current_theme: Optional[str] = None
        self.current_word: Optional[str] = None
        self.impostor_count = 0
        self.round_start_time: Optional[datetime] = None


class Room:
    """
    In-memory representation of a room.
    Built from the database rows for each request.
    """
    def __init__(self, room_id: str, name: str, host_id: Optional[str]):
        self.room_id = room_id
        self.name = name
        self.host_id = host_id
        self.players: List[Player] = []
        self.max_players = MAX_PLAYERS
        self.max_rounds = MAX_ROUNDS
        self.status: RoomStatus = RoomStatus.WAITING
        self.current_round = 0
        self.current_theme: Optional[str] = None
        self.current_word: Optional[str] = None
        self.played_words: List[str] = []
        self.game_state: Optional[GameState] = None
        self.created_at: Optional[datetime] = None
        self.updated_at: Optional[datetime] = None

    @property
    def phase(self) -> GamePhase:
        if self.game_state is None:
            return GamePhase.WAITING
        return self.game_state.phase

    def find_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.player_id == player_id), None)

    def to_dict(self):
        """
        Public room projection.
        Leaves out the current word, the played words and every impostor flag.
        """
        return {
            "id": self.room_id,
            "name": self.name,
            "hostId": self.host_id,
            "players": [p.to_dict() for p in self.players],
            "playerCount": len(self.players),
            "maxPlayers": self.max_players,
            "status": self.status.value,
            "currentRound": self.current_round,
            "maxRounds": self.max_rounds,
            "currentPhase": self.phase.value,
            "currentTheme": self.current_theme,
            "hasWord": self.current_word is not None,
            "impostorCount": self.game_state.impostor_count if self.game_state else 0,
            "createdAt": _iso(self.created_at),
            "lastUpdated": _iso(self.updated_at),
        }


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
