from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConnectInfo(BaseModel):
    """Engine.IO open packet sent by the server right after the socket opens."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sid: Optional[str] = None
    upgrades: list[str] = Field(default_factory=list)
    ping_interval: Optional[float] = Field(default=None, alias="pingInterval")
    ping_timeout: Optional[float] = Field(default=None, alias="pingTimeout")
    max_payload: Optional[int] = Field(default=None, alias="maxPayload")


class HandshakePayload(BaseModel):
    """Socket.IO namespace connect payload (``40{...}``)."""

    origin: str
    timestamp: int
    token: Optional[str] = None


class JoinRoomPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    username: str


class GetMessageHistoryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    before: Optional[str] = None
    limit: int


class SendMessagePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    message: str
    username: str
