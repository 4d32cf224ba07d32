"""Shared fixtures."""

import pytest
from fastapi import FastAPI

from presence_chat.api.app import create_app
from presence_chat.config import Settings
from presence_chat.repositories.memory import (
    InMemoryMessageRepository,
    InMemoryParticipantRepository,
)
from presence_chat.services.message_log import MessageLog
from presence_chat.services.registry import ParticipantRegistry
from presence_chat.services.session import SessionService
from presence_chat.services.sweeper import PresenceSweeper


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        INACTIVITY_THRESHOLD=10.0,
        SWEEP_INTERVAL=15.0,
        SWEEPER_ENABLED=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def registry(clock) -> ParticipantRegistry:
    return ParticipantRegistry(InMemoryParticipantRepository(), clock)


@pytest.fixture
def message_log(clock) -> MessageLog:
    return MessageLog(InMemoryMessageRepository(), clock)


@pytest.fixture
def session(registry, message_log) -> SessionService:
    return SessionService(registry, message_log)


@pytest.fixture
def sweeper(registry, message_log, clock) -> PresenceSweeper:
    return PresenceSweeper(registry, message_log, clock, interval=15.0, inactivity_threshold=10.0)


@pytest.fixture
def app(settings, clock) -> FastAPI:
    return create_app(settings=settings, clock=clock)
