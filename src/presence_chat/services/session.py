"""Session API: the user-facing chat operations."""

from typing import Any, List, Optional

import structlog

from ..domain.errors import NotFound, UnprocessableAuthor
from ..domain.models import Message, Participant
from ..domain.validation import clean_name, parse_draft, parse_limit, sanitize
from .message_log import MessageLog
from .registry import ParticipantRegistry

logger = structlog.get_logger()


class SessionService:
    """Composes the registry and the message log with validation and authorization.

    ``user`` arguments are the raw identity supplied out of band (the
    ``user`` header over HTTP), never taken from a message body.
    """

    def __init__(
        self,
        registry: ParticipantRegistry,
        message_log: MessageLog,
        join_notice: str = "joined the room...",
    ) -> None:
        self.registry = registry
        self.message_log = message_log
        self.join_notice = join_notice

    async def _present(self, user: Optional[str]) -> str:
        name = sanitize(user)
        if not name or not await self.registry.exists(name):
            logger.warning("unknown_author", user=user)
            raise UnprocessableAuthor(f"Participant {name!r} is not present")
        return name

    async def join(self, name: Any) -> Participant:
        name = clean_name(name)
        participant = await self.registry.join(name)
        await self.message_log.append_status(name, self.join_notice)
        logger.info("participant_joined", name=name)
        return participant

    async def heartbeat(self, user: Optional[str]) -> Participant:
        """Refresh ``user``'s inactivity timer. NotFound means rejoin."""
        name = sanitize(user)
        if not name:
            raise NotFound("No participant given")
        return await self.registry.heartbeat(name)

    async def list_participants(self) -> List[Participant]:
        return await self.registry.list()

    async def send_message(self, user: Optional[str], to: Any, text: Any, kind: Any) -> Message:
        draft = parse_draft(to, text, kind)
        sender = await self._present(user)
        message = await self.message_log.append(
            Message(sender=sender, to=draft.to, text=draft.text, kind=draft.kind)
        )
        logger.info("message_sent", message_id=message.id, sender=sender, kind=draft.kind.value)
        return message

    async def edit_message(
        self, user: Optional[str], message_id: int, to: Any, text: Any, kind: Any
    ) -> Message:
        draft = parse_draft(to, text, kind)
        editor = await self._present(user)
        return await self.message_log.update(
            message_id, editor, draft.to, draft.text, kind=draft.kind
        )

    async def delete_message(self, user: Optional[str], message_id: int) -> None:
        await self.message_log.delete(message_id, sanitize(user))

    async def list_messages(self, user: Optional[str], limit: Any = None) -> List[Message]:
        limit = parse_limit(limit, default=self.message_log.default_limit)
        return await self.message_log.list_visible_to(sanitize(user) or None, limit)
