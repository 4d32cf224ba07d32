"""Domain models for the chat application."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class MessageKind(str, Enum):
    """Kinds of message stored in the log."""

    MESSAGE = "message"
    PRIVATE_MESSAGE = "private_message"
    STATUS = "status"


CHAT_KINDS = (MessageKind.MESSAGE, MessageKind.PRIVATE_MESSAGE)


class Participant(BaseModel):
    """Participant model."""

    model_config = ConfigDict(frozen=True)

    name: str
    last_seen_at: float


class Message(BaseModel):
    """Message model.

    ``sender`` and ``kind`` serialize as ``from`` and ``type``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    sender: str = Field(alias="from")
    to: str
    text: str
    kind: MessageKind = Field(alias="type")
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def time(self) -> Optional[str]:
        if self.created_at is None:
            return None
        # server-local wall time
        return self.created_at.astimezone().strftime("%H:%M:%S")

    def is_visible_to(self, user: Optional[str]) -> bool:
        """Whether ``user`` may read this message."""
        if self.kind in (MessageKind.STATUS, MessageKind.MESSAGE):
            return True
        return user is not None and user in (self.sender, self.to)


class ParticipantCreate(BaseModel):
    """Join request body"""

    name: str


class MessageCreate(BaseModel):
    """Send/edit request body"""

    model_config = ConfigDict(populate_by_name=True)

    to: str
    text: str
    kind: str = Field(alias="type")
