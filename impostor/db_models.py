# impostor/db_models.py
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from impostor.config import MAX_PLAYERS, MAX_ROUNDS
from impostor.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class DBRoom(Base):
    """
    Represents a room in the database.
    Maps to the 'rooms' table.
    """
    __tablename__ = "rooms"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    host_id = Column(String(36), nullable=True)
    status = Column(String(20), default="waiting", nullable=False)
    max_players = Column(Integer, default=MAX_PLAYERS, nullable=False)
    current_round = Column(Integer, default=0, nullable=False)
    max_rounds = Column(Integer, default=MAX_ROUNDS, nullable=False)
    current_theme = Column(String(50), nullable=True)
    current_word = Column(String(100), nullable=True)
    played_words = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationship: One room has many players, one game state and an action log
    players = relationship(
        "DBPlayer", back_populates="room", cascade="all, delete-orphan",
        passive_deletes=True, order_by="DBPlayer.joined_at",
    )
    game_state = relationship(
        "DBGameState", back_populates="room", cascade="all, delete-orphan",
        passive_deletes=True, uselist=False,
    )
    actions = relationship(
        "DBGameAction", back_populates="room", cascade="all, delete-orphan",
        passive_deletes=True, order_by="DBGameAction.timestamp",
    )


class DBPlayer(Base):
    """
    Represents a player in the database.
    Maps to the 'players' table.
    """
    __tablename__ = "players"

    id = Column(String(36), primary_key=True, default=_uuid)
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    is_host = Column(Boolean, default=False, nullable=False)
    is_impostor = Column(Boolean, default=False, nullable=False)
    session_id = Column(String(36), default=_uuid, nullable=False)
    is_connected = Column(Boolean, default=True, nullable=False)
    last_seen = Column(DateTime, default=datetime.utcnow)
    joined_at = Column(DateTime, default=datetime.utcnow)

    # Relationship: Player belongs to one room
    room = relationship("DBRoom", back_populates="players")

    # Unique constraint: No duplicate names in same room
    __table_args__ = (
        UniqueConstraint('room_id', 'name', name='unique_player_name_per_room'),
    )


class DBGameState(Base):
    """
    Per-room game progress.
    Maps to the 'game_states' table.
    """
    __tablename__ = "game_states"

    id = Column(String(36), primary_key=True, default=_uuid)
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, unique=True)
    status = Column(String(20), default="waiting", nullable=False)
    phase = Column(String(30), default="waiting", nullable=False)
    current_round = Column(Integer, default=0, nullable=False)
    current_theme = Column(String(50), nullable=True)
    current_word = Column(String(100), nullable=True)
    impostor_count = Column(Integer, default=0, nullable=False)
    round_start_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    room = relationship("DBRoom", back_populates="game_state")


class DBGameAction(Base):
    """
    Append-only log of host commands.
    Maps to the 'game_actions' table.
    """
    __tablename__ = "game_actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(30), nullable=False)
    player_id = Column(String(36), nullable=False)
    data = Column(JSON, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow)

    room = relationship("DBRoom", back_populates="actions")
