"""In-memory repository implementations."""

import asyncio
from itertools import count
from typing import Dict, List, Optional

import structlog

from ..domain.models import Message, Participant
from .base import MessageRepository, ParticipantRepository

logger = structlog.get_logger()


class InMemoryParticipantRepository(ParticipantRepository):
    """Async-safe in-memory participant store."""

    def __init__(self) -> None:
        self._participants: Dict[str, Participant] = {}
        self._async_lock = asyncio.Lock()
        logger.info("participant_repository_initialized")

    async def insert_if_absent(self, participant: Participant) -> bool:
        async with self._async_lock:
            if participant.name in self._participants:
                return False
            self._participants[participant.name] = participant
            return True

    async def get(self, name: str) -> Optional[Participant]:
        async with self._async_lock:
            return self._participants.get(name)

    async def touch(self, name: str, seen_at: float) -> Optional[Participant]:
        async with self._async_lock:
            current = self._participants.get(name)
            if current is None:
                return None
            updated = current.model_copy(update={"last_seen_at": seen_at})
            self._participants[name] = updated
            return updated

    async def delete(self, name: str) -> bool:
        async with self._async_lock:
            return self._participants.pop(name, None) is not None

    async def delete_if_unchanged(self, name: str, last_seen_at: float) -> bool:
        async with self._async_lock:
            current = self._participants.get(name)
            if current is None or current.last_seen_at != last_seen_at:
                return False
            del self._participants[name]
            return True

    async def list_participants(self) -> List[Participant]:
        async with self._async_lock:
            return list(self._participants.values())


class InMemoryMessageRepository(MessageRepository):
    """Async-safe in-memory message store with monotonically increasing ids."""

    def __init__(self) -> None:
        self._messages: Dict[int, Message] = {}
        self._ids = count(1)
        self._async_lock = asyncio.Lock()
        logger.info("message_repository_initialized")

    async def add(self, message: Message) -> Message:
        async with self._async_lock:
            stored = message.model_copy(update={"id": next(self._ids)})
            self._messages[stored.id] = stored
            return stored.model_copy()

    async def get(self, message_id: int) -> Optional[Message]:
        async with self._async_lock:
            message = self._messages.get(message_id)
            return message.model_copy() if message is not None else None

    async def replace(self, message: Message) -> Optional[Message]:
        async with self._async_lock:
            if message.id not in self._messages:
                return None
            self._messages[message.id] = message.model_copy()
            return message

    async def delete(self, message_id: int) -> bool:
        async with self._async_lock:
            return self._messages.pop(message_id, None) is not None

    async def list_messages(self) -> List[Message]:
        async with self._async_lock:
            # dict preserves insertion order, which is id order
            return [m.model_copy() for m in self._messages.values()]
