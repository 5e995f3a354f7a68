# impostor/game_manager.py
import logging
import random
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from impostor.database import SessionLocal
from impostor.db_models import DBGameAction, DBGameState, DBPlayer, DBRoom
from impostor.errors import (
    AuthorizationError,
    CapacityError,
    NotFoundError,
    StateError,
    StoreError,
    ValidationError,
)
from impostor.models import ActionType, GamePhase, GameState, LeaveOutcome, Player, Room, RoomStatus
from impostor.roles import assign_impostors
from impostor.themes import get_theme
from impostor.views import player_view
from impostor.words import pick_word

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100


class GameManager:
    """
    Every room operation goes through here.

    Each call opens its own session, so nothing is cached between requests:
    host checks and room state are always read fresh from the database.
    """

    def __init__(self, session_factory=SessionLocal, rng: Optional[random.Random] = None):
        self.session_factory = session_factory
        self.rng = rng or random.Random()

    def _get_db(self) -> Session:
        """Get a new database session"""
        return self.session_factory()

    @contextmanager
    def _session(self):
        db = self._get_db()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Database error")
            raise StoreError() from e
        finally:
            db.close()

    # ------------------------------
    # Room lifecycle
    # ------------------------------
    def create_room(self, player_name: Optional[str]) -> Room:
        """
        Create a room with `player_name` as its host.
        The host's player row, the room and its game state are committed together.
        """
        name = _clean_name(player_name)

        with self._session() as db:
            room_id = str(uuid.uuid4())
            player_id = str(uuid.uuid4())

            db_room = DBRoom(
                id=room_id,
                name=name,
                host_id=player_id,
                status=RoomStatus.WAITING.value,
                played_words=[],
            )
            db.add(db_room)
            db.add(DBPlayer(id=player_id, room_id=room_id, name=name, is_host=True))
            db.add(DBGameState(room_id=room_id))
            db.commit()

            logger.info("Room %s created by %s", room_id, name)
            return self._db_room_to_memory(self._load_room(db, room_id))

    def list_rooms(self) -> List[Room]:
        """Rooms still accepting players, newest first."""
        with self._session() as db:
            db_rooms = (
                db.query(DBRoom)
                .filter(DBRoom.status == RoomStatus.WAITING.value)
                .order_by(DBRoom.created_at.desc())
                .all()
            )
            return [self._db_room_to_memory(r) for r in db_rooms]

    def get_room(self, room_id: Optional[str]) -> Room:
        room_id = _require(room_id, "Room ID")
        with self._session() as db:
            return self._db_room_to_memory(self._load_room(db, room_id))

    def join_room(self, room_id: Optional[str], player_name: Optional[str]) -> Player:
        """
        Add `player_name` to the room.

        Joining again with a name already in the room refreshes that player's
        session instead of adding a second row, so reloading the page is safe.
        """
        room_id = _require(room_id, "Room ID")
        name = _clean_name(player_name)

        with self._session() as db:
            db_room = self._load_room(db, room_id)
            if db_room.status != RoomStatus.WAITING.value:
                raise StateError("The game has already started")

            existing = next((p for p in db_room.players if p.name == name), None)
            if existing:
                existing.session_id = str(uuid.uuid4())
                existing.is_connected = True
                existing.last_seen = datetime.utcnow()
                db_room.updated_at = datetime.utcnow()
                db.commit()
                logger.info("Player %s rejoined room %s", name, room_id)
                return _db_player_to_memory(existing)

            if len(db_room.players) >= db_room.max_players:
                raise CapacityError("Room is full")

            db_player = DBPlayer(id=str(uuid.uuid4()), room_id=room_id, name=name, is_host=False)
            db.add(db_player)
            db_room.updated_at = datetime.utcnow()
            try:
                db.commit()
            except IntegrityError:
                # Someone else took the name between our read and the insert
                db.rollback()
                raise ValidationError(f"Player name '{name}' already taken in this room")

            logger.info("Player %s joined room %s", name, room_id)
            return _db_player_to_memory(db_player)

    def remove_player(self, room_id: Optional[str], player_id: Optional[str]) -> LeaveOutcome:
        """
        Remove a player. If the player was the host the whole room goes with them.
        """
        room_id = _require(room_id, "Room ID")
        player_id = _require(player_id, "Player ID")

        with self._session() as db:
            db_player = (
                db.query(DBPlayer)
                .filter(DBPlayer.id == player_id, DBPlayer.room_id == room_id)
                .first()
            )
            if not db_player:
                raise NotFoundError("Player not found in this room")

            db_room = db_player.room
            name = db_player.name
            if db_player.is_host:
                logger.info("Host %s left room %s, deleting it", name, room_id)
                db.delete(db_room)
                db.commit()
                return LeaveOutcome.HOST_LEFT

            db.delete(db_player)
            db.flush()
            if db.query(DBPlayer).filter(DBPlayer.room_id == room_id).count() == 0:
                db.delete(db_room)
                db.commit()
                logger.info("Last player left room %s, deleting it", room_id)
                return LeaveOutcome.HOST_LEFT

            db_room.updated_at = datetime.utcnow()
            db.commit()
            logger.info("Player %s left room %s", name, room_id)
            return LeaveOutcome.PLAYER_LEFT

    def get_room_summary(self, room_id: str) -> Optional[Dict]:
        """Short description of a room for leave notifications, None once it's gone."""
        with self._session() as db:
            db_room = db.query(DBRoom).filter(DBRoom.id == room_id).first()
            if not db_room:
                return None
            host = next((p for p in db_room.players if p.is_host), None)
            return {
                "roomName": db_room.name,
                "playerCount": len(db_room.players),
                "hostName": host.name if host else None,
            }

    def heartbeat(self, room_id: Optional[str], player_id: Optional[str]) -> Player:
        room_id = _require(room_id, "Room ID")
        player_id = _require(player_id, "Player ID")

        with self._session() as db:
            db_player = self._load_player(db, room_id, player_id)
            _touch(db_player)
            db.commit()
            return _db_player_to_memory(db_player)

    # ------------------------------
    # Host commands
    # ------------------------------
    def start_game(self, room_id: Optional[str], host_id: Optional[str], theme_id: Optional[str]) -> Room:
        """Assign impostors, set the theme and move the room to its first round."""
        room_id = _require(room_id, "Room ID")
        host_id = _require(host_id, "Host ID")
        theme_id = _require(theme_id, "Theme ID")

        with self._session() as db:
            db_room = self._require_host(db, room_id, host_id)
            if get_theme(theme_id) is None:
                raise NotFoundError(f"Theme '{theme_id}' not found")
            if db_room.status == RoomStatus.PLAYING.value:
                raise StateError("The game is already in progress")

            for db_player in db_room.players:
                db_player.is_impostor = False
            impostor_count = assign_impostors(db_room.players, self.rng)
            now = datetime.utcnow()

            db_room.status = RoomStatus.PLAYING.value
            db_room.current_theme = theme_id
            db_room.current_round = 1
            db_room.current_word = None
            db_room.played_words = []
            db_room.updated_at = now

            state = self._game_state(db, db_room)
            state.status = RoomStatus.PLAYING.value
            state.phase = GamePhase.THEME_SELECTION.value
            state.current_theme = theme_id
            state.current_round = 1
            state.current_word = None
            state.impostor_count = impostor_count
            state.round_start_time = now

            self._record_action(db, room_id, ActionType.START_GAME, host_id, {"themeId": theme_id})
            db.commit()

            logger.info(
                "Game started in room %s with theme %s (%d players, %d impostors)",
                room_id, theme_id, len(db_room.players), impostor_count,
            )
            return self._db_room_to_memory(db_room)

    def change_theme(self, room_id: Optional[str], host_id: Optional[str], theme_id: Optional[str]) -> Room:
        """Switch theme mid-game. Word history starts over, impostors stay the same."""
        room_id = _require(room_id, "Room ID")
        host_id = _require(host_id, "Host ID")
        theme_id = _require(theme_id, "Theme ID")

        with self._session() as db:
            db_room = self._require_host(db, room_id, host_id)
            if get_theme(theme_id) is None:
                raise NotFoundError(f"Theme '{theme_id}' not found")
            _require_playing(db_room)

            db_room.current_theme = theme_id
            db_room.current_word = None
            db_room.played_words = []
            db_room.updated_at = datetime.utcnow()

            state = self._game_state(db, db_room)
            state.current_theme = theme_id
            state.current_word = None
            state.phase = GamePhase.THEME_SELECTION.value

            self._record_action(db, room_id, ActionType.CHANGE_THEME, host_id, {"themeId": theme_id})
            db.commit()

            logger.info("Room %s switched to theme %s", room_id, theme_id)
            return self._db_room_to_memory(db_room)

    def generate_word(self, room_id: Optional[str], host_id: Optional[str]) -> str:
        """Draw the next word of the current theme and start playing it."""
        room_id = _require(room_id, "Room ID")
        host_id = _require(host_id, "Host ID")

        with self._session() as db:
            db_room = self._require_host(db, room_id, host_id)
            _require_playing(db_room)

            theme = get_theme(db_room.current_theme)
            if theme is None:
                raise StateError("No theme selected")

            state = self._game_state(db, db_room)
            if state.phase == GamePhase.ROUND_END.value:
                raise StateError("The round is over, start the next round first")

            word, played_words = pick_word(theme.words, db_room.played_words or [], self.rng)
            now = datetime.utcnow()

            db_room.current_word = word
            db_room.played_words = played_words
            db_room.updated_at = now

            state.current_word = word
            state.phase = GamePhase.PLAYING.value
            state.round_start_time = now

            self._record_action(db, room_id, ActionType.GENERATE_WORD, host_id, {"word": word})
            db.commit()

            logger.info("New word drawn in room %s (%d/%d played)", room_id, len(played_words), len(theme.words))
            logger.debug("Room %s word: %s", room_id, word)
            return word

    def next_round(self, room_id: Optional[str], host_id: Optional[str]) -> Room:
        """Advance the round counter. Impostors are kept for the whole game."""
        room_id = _require(room_id, "Room ID")
        host_id = _require(host_id, "Host ID")

        with self._session() as db:
            db_room = self._require_host(db, room_id, host_id)
            _require_playing(db_room)

            next_round = (db_room.current_round or 0) + 1
            db_room.current_round = next_round
            db_room.current_word = None
            db_room.updated_at = datetime.utcnow()

            state = self._game_state(db, db_room)
            state.current_round = next_round
            state.current_word = None
            state.phase = GamePhase.WORD_GENERATION.value

            self._record_action(db, room_id, ActionType.NEXT_ROUND, host_id, {"round": next_round})
            db.commit()

            logger.info("Room %s moved to round %d", room_id, next_round)
            return self._db_room_to_memory(db_room)

    def end_round(self, room_id: Optional[str], host_id: Optional[str]) -> Room:
        room_id = _require(room_id, "Room ID")
        host_id = _require(host_id, "Host ID")

        with self._session() as db:
            db_room = self._require_host(db, room_id, host_id)
            _require_playing(db_room)

            state = self._game_state(db, db_room)
            state.phase = GamePhase.ROUND_END.value
            db_room.updated_at = datetime.utcnow()

            self._record_action(db, room_id, ActionType.END_ROUND, host_id, {"round": db_room.current_round})
            db.commit()

            logger.info("Room %s ended round %d", room_id, db_room.current_round)
            return self._db_room_to_memory(db_room)

    def end_game(self, room_id: Optional[str], host_id: Optional[str]) -> Room:
        room_id = _require(room_id, "Room ID")
        host_id = _require(host_id, "Host ID")

        with self._session() as db:
            db_room = self._require_host(db, room_id, host_id)
            _require_playing(db_room)

            db_room.status = RoomStatus.FINISHED.value
            db_room.current_word = None
            db_room.updated_at = datetime.utcnow()

            state = self._game_state(db, db_room)
            state.status = RoomStatus.FINISHED.value
            state.phase = GamePhase.GAME_END.value
            state.current_word = None

            self._record_action(db, room_id, ActionType.END_GAME, host_id, {"rounds": db_room.current_round})
            db.commit()

            logger.info("Game in room %s finished after %d rounds", room_id, db_room.current_round)
            return self._db_room_to_memory(db_room)

    # ------------------------------
    # Player view
    # ------------------------------
    def get_player_view(self, room_id: Optional[str], player_id: Optional[str]) -> dict:
        """
        What `player_id` sees of the room. Polling this also counts as a heartbeat.
        """
        room_id = _require(room_id, "Room ID")
        player_id = _require(player_id, "Player ID")

        with self._session() as db:
            db_room = self._load_room(db, room_id)
            db_player = next((p for p in db_room.players if p.id == player_id), None)
            if db_player is None:
                raise NotFoundError("Player not found in this room")

            _touch(db_player)
            db.commit()

            room = self._db_room_to_memory(db_room)
            return player_view(room, room.find_player(player_id))

    # ------------------------------
    # Cleanup
    # ------------------------------
    def cleanup_orphaned_rooms(self) -> int:
        """Delete every room where nobody holds the host flag."""
        with self._session() as db:
            orphaned = db.query(DBRoom).filter(~DBRoom.players.any(DBPlayer.is_host.is_(True))).all()
            for db_room in orphaned:
                logger.info("Deleting orphaned room %s", db_room.id)
                db.delete(db_room)
            db.commit()
            return len(orphaned)

    def cleanup_empty_rooms(self) -> int:
        with self._session() as db:
            empty = db.query(DBRoom).filter(~DBRoom.players.any()).all()
            for db_room in empty:
                logger.info("Deleting empty room %s", db_room.id)
                db.delete(db_room)
            db.commit()
            return len(empty)

    def cleanup_stale_rooms(self, max_idle_minutes: int) -> int:
        """Delete rooms nobody has touched or polled in the last `max_idle_minutes`."""
        cutoff = datetime.utcnow() - timedelta(minutes=max_idle_minutes)
        with self._session() as db:
            stale = (
                db.query(DBRoom)
                .filter(DBRoom.updated_at < cutoff, ~DBRoom.players.any(DBPlayer.last_seen >= cutoff))
                .all()
            )
            for db_room in stale:
                logger.info("Deleting stale room %s (last update %s)", db_room.id, db_room.updated_at)
                db.delete(db_room)
            db.commit()
            return len(stale)

    def mark_disconnected_players(self, timeout_seconds: int) -> int:
        """Flag players we haven't heard from as disconnected. Nobody is removed."""
        cutoff = datetime.utcnow() - timedelta(seconds=timeout_seconds)
        with self._session() as db:
            count = (
                db.query(DBPlayer)
                .filter(DBPlayer.is_connected.is_(True), DBPlayer.last_seen < cutoff)
                .update({"is_connected": False}, synchronize_session=False)
            )
            db.commit()
            if count:
                logger.info("Marked %d players as disconnected", count)
            return count

    def run_cleanup(self, max_idle_minutes: int, disconnect_timeout_seconds: int) -> Dict[str, int]:
        empty = self.cleanup_empty_rooms()
        orphaned = self.cleanup_orphaned_rooms()
        stale = self.cleanup_stale_rooms(max_idle_minutes)
        disconnected = self.mark_disconnected_players(disconnect_timeout_seconds)
        summary = {
            "orphanedRooms": orphaned,
            "emptyRooms": empty,
            "staleRooms": stale,
            "disconnectedPlayers": disconnected,
            "totalCleaned": orphaned + empty + stale,
        }
        logger.info("Cleanup finished: %s", summary)
        return summary

    # ------------------------------
    # Helpers
    # ------------------------------
    def _load_room(self, db: Session, room_id: str) -> DBRoom:
        db_room = db.query(DBRoom).filter(DBRoom.id == room_id).first()
        if not db_room:
            raise NotFoundError("Room not found")
        return db_room

    def _load_player(self, db: Session, room_id: str, player_id: str) -> DBPlayer:
        self._load_room(db, room_id)
        db_player = (
            db.query(DBPlayer)
            .filter(DBPlayer.id == player_id, DBPlayer.room_id == room_id)
            .first()
        )
        if not db_player:
            raise NotFoundError("Player not found in this room")
        return db_player

    def _require_host(self, db: Session, room_id: str, host_id: str) -> DBRoom:
        db_room = self._load_room(db, room_id)
        host = next((p for p in db_room.players if p.id == host_id and p.is_host), None)
        if host is None:
            raise AuthorizationError("Only the host can do that")
        return db_room

    def _game_state(self, db: Session, db_room: DBRoom) -> DBGameState:
        if db_room.game_state is None:
            db_room.game_state = DBGameState(room_id=db_room.id)
            db.flush()
        return db_room.game_state

    def _record_action(self, db: Session, room_id: str, action_type: ActionType, player_id: str, data=None):
        db.add(DBGameAction(room_id=room_id, type=action_type.value, player_id=player_id, data=data))

    def _db_room_to_memory(self, db_room: DBRoom) -> Room:
        """
        Helper: Convert database models to in-memory Room object.
        """
        room = Room(room_id=db_room.id, name=db_room.name, host_id=db_room.host_id)
        room.max_players = db_room.max_players
        room.max_rounds = db_room.max_rounds
        room.status = RoomStatus(db_room.status)
        room.current_round = db_room.current_round
        room.current_theme = db_room.current_theme
        room.current_word = db_room.current_word
        room.played_words = list(db_room.played_words or [])
        room.created_at = db_room.created_at
        room.updated_at = db_room.updated_at
        room.players = [_db_player_to_memory(p) for p in db_room.players]

        db_state = db_room.game_state
        if db_state is not None:
            state = GameState(room_id=db_room.id)
            state.status = RoomStatus(db_state.status)
            state.phase = GamePhase(db_state.phase)
            state.current_round = db_state.current_round
            state.current_theme = db_state.current_theme
            state.current_word = db_state.current_word
            state.impostor_count = db_state.impostor_count
            state.round_start_time = db_state.round_start_time
            room.game_state = state

        return room


def _db_player_to_memory(db_player: DBPlayer) -> Player:
    player = Player(player_id=db_player.id, name=db_player.name, is_host=db_player.is_host)
    player.is_impostor = db_player.is_impostor
    player.is_connected = db_player.is_connected
    player.session_id = db_player.session_id
    player.last_seen = db_player.last_seen
    return player


def _touch(db_player: DBPlayer):
    db_player.is_connected = True
    db_player.last_seen = datetime.utcnow()


def _require(value: Optional[str], label: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{label} is required")
    return str(value).strip()


def _clean_name(player_name: Optional[str]) -> str:
    name = _require(player_name, "Player name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Player name must be at most {MAX_NAME_LENGTH} characters")
    return name


def _require_playing(db_room: DBRoom):
    if db_room.status != RoomStatus.PLAYING.value:
        raise StateError("The game is not active")
