"""Participant registry: who is present and when they last signalled."""

from typing import List

import structlog

from ..domain.errors import Conflict, NotFound
from ..domain.models import Participant
from ..repositories.base import ParticipantRepository
from .clock import Clock

logger = structlog.get_logger()


class ParticipantRegistry:
    """Owns the set of active participants.

    Name uniqueness and heartbeat/expiry races are settled by the
    repository's atomic primitives, so concurrent callers never see two
    live participants with one name or a heartbeat that revives an
    evicted participant.
    """

    def __init__(self, repository: ParticipantRepository, clock: Clock) -> None:
        self.repository = repository
        self.clock = clock

    async def join(self, name: str) -> Participant:
        participant = Participant(name=name, last_seen_at=self.clock.now())
        if not await self.repository.insert_if_absent(participant):
            logger.warning("participant_name_taken", name=name)
            raise Conflict(f"Participant {name!r} is already present")
        logger.info("participant_registered", name=name)
        return participant

    async def heartbeat(self, name: str) -> Participant:
        participant = await self.repository.touch(name, self.clock.now())
        if participant is None:
            raise NotFound(f"Participant {name!r} not found")
        logger.debug("participant_heartbeat", name=name, last_seen_at=participant.last_seen_at)
        return participant

    async def list(self) -> List[Participant]:
        return await self.repository.list_participants()

    async def remove(self, name: str) -> None:
        """Idempotent removal."""
        if await self.repository.delete(name):
            logger.info("participant_removed", name=name)

    async def exists(self, name: str) -> bool:
        return await self.repository.get(name) is not None

    async def expired(self, now: float, threshold: float) -> List[Participant]:
        """Snapshot of participants silent for longer than ``threshold``."""
        return [
            p for p in await self.repository.list_participants()
            if now - p.last_seen_at > threshold
        ]

    async def remove_if_unchanged(self, participant: Participant) -> bool:
        """Compare-and-delete against a snapshot taken by ``expired``."""
        return await self.repository.delete_if_unchanged(
            participant.name, participant.last_seen_at
        )

    async def restore(self, participant: Participant) -> bool:
        """Put back a participant removed by ``remove_if_unchanged``.

        A participant who rejoined under the same name in the meantime is
        left alone.
        """
        restored = await self.repository.insert_if_absent(participant)
        if restored:
            logger.info("participant_restored", name=participant.name)
        else:
            logger.warning("participant_restore_skipped", name=participant.name)
        return restored
