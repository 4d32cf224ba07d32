"""Base repository interfaces.

Each method is one atomic step against the durable store. Implementations
raise ``StorageError`` on persistence faults and never hand back partial
data.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..domain.models import Message, Participant


class ParticipantRepository(ABC):
    """Participants keyed by name."""

    @abstractmethod
    async def insert_if_absent(self, participant: Participant) -> bool:
        """Store ``participant`` unless its name is taken. Returns True if stored."""
        pass

    @abstractmethod
    async def get(self, name: str) -> Optional[Participant]:
        """Retrieve a participant by name."""
        pass

    @abstractmethod
    async def touch(self, name: str, seen_at: float) -> Optional[Participant]:
        """Set ``last_seen_at`` on an existing participant; None if absent."""
        pass

    @abstractmethod
    async def delete(self, name: str) -> bool:
        """Remove a participant. Returns True if one was removed."""
        pass

    @abstractmethod
    async def delete_if_unchanged(self, name: str, last_seen_at: float) -> bool:
        """Remove a participant only if its ``last_seen_at`` still matches."""
        pass

    @abstractmethod
    async def list_participants(self) -> List[Participant]:
        """List participants in insertion order."""
        pass


class MessageRepository(ABC):
    """Messages keyed by generated id."""

    @abstractmethod
    async def add(self, message: Message) -> Message:
        """Store a message, assigning the next id."""
        pass

    @abstractmethod
    async def get(self, message_id: int) -> Optional[Message]:
        """Retrieve a message by id."""
        pass

    @abstractmethod
    async def replace(self, message: Message) -> Optional[Message]:
        """Overwrite a stored message with the same id; None if it is gone."""
        pass

    @abstractmethod
    async def delete(self, message_id: int) -> bool:
        """Remove a message. Returns True if one was removed."""
        pass

    @abstractmethod
    async def list_messages(self) -> List[Message]:
        """All messages in creation order."""
        pass
