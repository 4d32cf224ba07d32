"""Message log with per-reader visibility."""

from datetime import datetime, timezone
from typing import List, Optional

import structlog

from ..domain.errors import Forbidden, NotFound, ValidationError
from ..domain.models import Message, MessageKind
from ..domain.validation import parse_limit
from ..repositories.base import MessageRepository
from .clock import Clock

logger = structlog.get_logger()

DEFAULT_LIMIT = 100


class MessageLog:
    """Append-only ordered store of chat and status messages."""

    def __init__(
        self,
        repository: MessageRepository,
        clock: Clock,
        broadcast_target: str = "Todos",
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.broadcast_target = broadcast_target
        self.default_limit = default_limit

    def _timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.clock.now(), tz=timezone.utc)

    async def append(self, message: Message) -> Message:
        stored = await self.repository.add(
            message.model_copy(update={"created_at": self._timestamp()})
        )
        logger.info(
            "message_appended",
            message_id=stored.id,
            sender=stored.sender,
            kind=stored.kind.value,
        )
        return stored

    async def append_status(self, name: str, text: str) -> Message:
        """Record a join/leave notice about ``name``."""
        return await self.append(
            Message(
                sender=name,
                to=self.broadcast_target,
                text=text,
                kind=MessageKind.STATUS,
            )
        )

    async def find(self, message_id: int) -> Message:
        message = await self.repository.get(message_id)
        if message is None:
            raise NotFound(f"Message {message_id} not found")
        return message

    async def list_visible_to(self, user: Optional[str], limit: Optional[int] = None) -> List[Message]:
        """Most recent ``limit`` messages ``user`` may read, newest first."""
        limit = parse_limit(limit, default=self.default_limit)
        visible: List[Message] = []
        for message in reversed(await self.repository.list_messages()):
            if message.is_visible_to(user):
                visible.append(message)
                if len(visible) == limit:
                    break
        return visible

    async def _owned(self, message_id: int, requester: str) -> Message:
        message = await self.find(message_id)
        if message.kind == MessageKind.STATUS or message.sender != requester:
            logger.warning(
                "message_access_denied", message_id=message_id, requester=requester
            )
            raise Forbidden(f"{requester!r} is not the author of message {message_id}")
        return message

    async def update(
        self,
        message_id: int,
        editor: str,
        new_to: str,
        new_text: str,
        kind: Optional[MessageKind] = None,
    ) -> Message:
        """Overwrite recipient and text of an authored message."""
        message = await self._owned(message_id, editor)
        if kind is not None and kind != message.kind:
            raise ValidationError("message type cannot be changed")
        updated = message.model_copy(
            update={"to": new_to, "text": new_text, "created_at": self._timestamp()}
        )
        if await self.repository.replace(updated) is None:
            raise NotFound(f"Message {message_id} not found")
        logger.info("message_updated", message_id=message_id, editor=editor)
        return updated

    async def delete(self, message_id: int, requester: str) -> None:
        await self._owned(message_id, requester)
        if not await self.repository.delete(message_id):
            raise NotFound(f"Message {message_id} not found")
        logger.info("message_deleted", message_id=message_id, requester=requester)
