from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single chat line posted to a pump.fun room."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str
    room_id: str = Field(default="", alias="roomId")
    username: str = ""
    user_address: str = Field(default="", alias="userAddress")
    message: str = ""
    profile_image: Optional[str] = None
    timestamp: str = ""
    message_type: str = Field(default="REGULAR", alias="messageType")
    expires_at: Optional[int] = Field(default=None, alias="expiresAt")


class RelayedMessage(BaseModel):
    """Sender/text pair handed to the dialogue scheduler."""

    model_config = ConfigDict(frozen=True)

    sender: str
    text: str

    @classmethod
    def from_chat(cls, message: ChatMessage) -> RelayedMessage:
        return cls(sender=message.username, text=message.message)
