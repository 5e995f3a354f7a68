# impostor/schemas.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateRoomRequest(CamelModel):
    player_name: Optional[str] = Field(default=None, alias="playerName")


class JoinRoomRequest(CamelModel):
    player_name: Optional[str] = Field(default=None, alias="playerName")


class LeaveRoomRequest(CamelModel):
    player_id: Optional[str] = Field(default=None, alias="playerId")
    player_name: Optional[str] = Field(default=None, alias="playerName")


class HeartbeatRequest(CamelModel):
    player_id: Optional[str] = Field(default=None, alias="playerId")


class HostCommandRequest(CamelModel):
    host_id: Optional[str] = Field(default=None, alias="hostId")


class ThemeCommandRequest(HostCommandRequest):
    theme_id: Optional[str] = Field(default=None, alias="themeId")
