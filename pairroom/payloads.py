"""Validation models for inbound Socket.IO payloads.

The browser client sends camelCase keys (``roomId``); the models expose
snake_case attributes and accept either spelling.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MAX_ROOM_ID_CHARS = 200
MAX_CODE_CHARS = 100 * 1024
MAX_MESSAGE_CHARS = 4000
MAX_SENDER_CHARS = 100


class _InboundPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class JoinRoomPayload(_InboundPayload):
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=MAX_ROOM_ID_CHARS)

    @classmethod
    def parse_event(cls, data: Any) -> "JoinRoomPayload":
        """``join-room`` carries the bare room id; a ``{"roomId": ...}`` object is also accepted."""
        if isinstance(data, str):
            data = {"roomId": data}
        return cls.model_validate(data)


class CodeChangePayload(_InboundPayload):
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=MAX_ROOM_ID_CHARS)
    # Empty code is a legitimate edit (the student cleared the editor).
    code: str = Field(..., max_length=MAX_CODE_CHARS)


class SendMessagePayload(_InboundPayload):
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=MAX_ROOM_ID_CHARS)
    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_CHARS)
    # Optional; the gateway falls back to the role label.
    sender: str | None = Field(None, max_length=MAX_SENDER_CHARS)
    role: Literal["mentor", "student"]
