"""Background eviction of silent participants."""

import asyncio
from typing import List, Optional

import structlog

from ..domain.models import Participant
from ..metrics import EVICTIONS, SWEEP_FAILURES
from .clock import Clock
from .message_log import MessageLog
from .registry import ParticipantRegistry

logger = structlog.get_logger()


class PresenceSweeper:
    """Periodically removes participants whose heartbeat went stale.

    A participant silent for more than ``inactivity_threshold`` seconds is
    removed on the next cycle and a leave notice is appended to the log.
    Cycles run every ``interval`` seconds and never overlap.
    """

    def __init__(
        self,
        registry: ParticipantRegistry,
        message_log: MessageLog,
        clock: Clock,
        interval: float = 15.0,
        inactivity_threshold: float = 10.0,
        leave_notice: str = "left the room...",
    ) -> None:
        self.registry = registry
        self.message_log = message_log
        self.clock = clock
        self.interval = interval
        self.inactivity_threshold = inactivity_threshold
        self.leave_notice = leave_notice
        self._cycle_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        logger.info(
            "presence_sweeper_initialized",
            interval=interval,
            inactivity_threshold=inactivity_threshold,
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the periodic sweep task."""
        if self._task is None:
            self._task = asyncio.create_task(self._periodic_sweep())
            logger.info("presence_sweeper_started")

    async def stop(self) -> None:
        """Stop the periodic sweep task once any running cycle has finished."""
        if self._task is not None:
            # with the cycle lock held the task is sleeping or waiting for the lock
            async with self._cycle_lock:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
            self._task = None
            logger.info("presence_sweeper_stopped")

    async def _periodic_sweep(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.interval)
                await self.sweep_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                SWEEP_FAILURES.inc()
                logger.error("sweep_cycle_failed", error=str(e))

    async def _evict(self, participant: Participant) -> bool:
        """Remove one stale participant and announce the departure.

        If the notice cannot be stored the participant is put back, so the
        next cycle evicts and announces it again.
        """
        if not await self.registry.remove_if_unchanged(participant):
            # heartbeat or removal won the race
            logger.info("eviction_skipped", name=participant.name)
            return False
        try:
            await self.message_log.append_status(participant.name, self.leave_notice)
        except Exception:
            await self.registry.restore(participant)
            raise
        return True

    async def sweep_once(self) -> List[str]:
        """Run one eviction cycle. Returns the names evicted."""
        async with self._cycle_lock:
            now = self.clock.now()
            stale = await self.registry.expired(now, self.inactivity_threshold)
            evicted: List[str] = []
            for participant in stale:
                try:
                    if not await self._evict(participant):
                        continue
                except Exception as e:
                    SWEEP_FAILURES.inc()
                    logger.error(
                        "eviction_failed",
                        name=participant.name,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    continue
                EVICTIONS.inc()
                evicted.append(participant.name)
                logger.info(
                    "participant_evicted",
                    name=participant.name,
                    idle_for=round(now - participant.last_seen_at, 3),
                )
            return evicted
