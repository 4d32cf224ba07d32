"""
FastAPI Application Module

HTTP surface of the presence chat service. Participants join by name, keep
themselves alive with status heartbeats and exchange broadcast or private
messages. A background sweeper evicts participants that stop sending
heartbeats and announces their departure in the message log.

Key Features:
- Async request handling with FastAPI
- Background presence sweeper tied to the app lifespan
- Structured logging and Prometheus metrics
- CORS and OpenTelemetry support
"""

from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Type

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import generate_latest
from structlog import get_logger

from ..config import Settings, get_settings
from ..domain.errors import (
    ChatError,
    Conflict,
    Forbidden,
    NotFound,
    StorageError,
    UnprocessableAuthor,
    ValidationError,
)
from ..domain.models import Message, MessageCreate, Participant, ParticipantCreate
from ..log import configure_logging
from ..metrics import CUSTOM_REGISTRY, ERRORS, REQUESTS
from ..repositories.memory import InMemoryMessageRepository, InMemoryParticipantRepository
from ..services.clock import Clock, SystemClock
from ..services.message_log import MessageLog
from ..services.registry import ParticipantRegistry
from ..services.session import SessionService
from ..services.sweeper import PresenceSweeper

logger = get_logger()

STATUS_CODES: Dict[Type[ChatError], int] = {
    ValidationError: 422,
    UnprocessableAuthor: 422,
    Conflict: 409,
    NotFound: 404,
    Forbidden: 401,
    StorageError: 500,
}


def get_session(request: Request) -> SessionService:
    """Returns the session service bound to this app"""
    return request.app.state.session


def _route_of(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    settings = settings or get_settings()
    clock = clock or SystemClock()
    configure_logging(settings)

    registry = ParticipantRegistry(InMemoryParticipantRepository(), clock)
    message_log = MessageLog(
        InMemoryMessageRepository(),
        clock,
        broadcast_target=settings.BROADCAST_TARGET,
        default_limit=settings.DEFAULT_MESSAGE_LIMIT,
    )
    session = SessionService(registry, message_log, join_notice=settings.JOIN_NOTICE)
    sweeper = PresenceSweeper(
        registry,
        message_log,
        clock,
        interval=settings.SWEEP_INTERVAL,
        inactivity_threshold=settings.INACTIVITY_THRESHOLD,
        leave_notice=settings.LEAVE_NOTICE,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Starts and stops the presence sweeper"""
        if settings.SWEEPER_ENABLED:
            await sweeper.start()
        logger.info("application_startup_complete")

        yield

        await sweeper.stop()
        logger.info("application_shutdown_complete")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Presence-aware group chat with broadcast and private messages",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.message_log = message_log
    app.state.session = session
    app.state.sweeper = sweeper

    # Enable cross-origin requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Set up request tracing
    FastAPIInstrumentor.instrument_app(app)

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Tracks requests and their outcome"""
        logger.info("request_started", method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
        except Exception as e:
            ERRORS.labels(request.method, _route_of(request)).inc()
            logger.error("request_failed", path=request.url.path, error=str(e))
            raise
        REQUESTS.labels(request.method, _route_of(request)).inc()
        if response.status_code >= 400:
            ERRORS.labels(request.method, _route_of(request)).inc()
        return response

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
        status_code = STATUS_CODES.get(type(exc), 500)
        if status_code >= 500:
            logger.error("storage_failure", path=request.url.path, error=str(exc))
            detail = "Internal storage error"
        else:
            logger.warning(
                "request_rejected",
                path=request.url.path,
                error=type(exc).__name__,
                detail=str(exc),
            )
            detail = str(exc)
        return JSONResponse(status_code=status_code, content={"detail": detail})

    @app.post("/participants", response_model=Participant, status_code=201)
    async def join(
        body: ParticipantCreate,
        session: SessionService = Depends(get_session),
    ) -> Participant:
        """Registers a new participant and announces the arrival"""
        return await session.join(body.name)

    @app.get("/participants", response_model=List[Participant])
    async def list_participants(
        session: SessionService = Depends(get_session),
    ) -> List[Participant]:
        """Lists everyone currently present"""
        return await session.list_participants()

    @app.post("/messages", response_model=Message, status_code=201)
    async def send_message(
        body: MessageCreate,
        user: Optional[str] = Header(None),
        session: SessionService = Depends(get_session),
    ) -> Message:
        """Posts a broadcast or private message as the header user"""
        return await session.send_message(user, body.to, body.text, body.kind)

    @app.get("/messages", response_model=List[Message])
    async def list_messages(
        limit: Optional[str] = None,
        user: Optional[str] = Header(None),
        session: SessionService = Depends(get_session),
    ) -> List[Message]:
        """Most recent messages visible to the header user, newest first"""
        return await session.list_messages(user, limit)

    @app.put("/messages/{message_id}", response_model=Message)
    async def edit_message(
        message_id: int,
        body: MessageCreate,
        user: Optional[str] = Header(None),
        session: SessionService = Depends(get_session),
    ) -> Message:
        """Rewrites recipient and text of the header user's own message"""
        return await session.edit_message(user, message_id, body.to, body.text, body.kind)

    @app.delete("/messages/{message_id}")
    async def delete_message(
        message_id: int,
        user: Optional[str] = Header(None),
        session: SessionService = Depends(get_session),
    ) -> Response:
        """Deletes the header user's own message"""
        await session.delete_message(user, message_id)
        return Response(status_code=200)

    @app.post("/status", response_model=Participant)
    async def heartbeat(
        user: Optional[str] = Header(None),
        session: SessionService = Depends(get_session),
    ) -> Participant:
        """Keeps the header user alive; 404 means rejoin"""
        return await session.heartbeat(user)

    @app.get("/health")
    async def health(session: SessionService = Depends(get_session)) -> dict:
        return {"status": "ok", "participants": len(await session.list_participants())}

    @app.get("/metrics")
    async def metrics():
        """Provides Prometheus metrics for system monitoring"""
        return Response(generate_latest(CUSTOM_REGISTRY), media_type="text/plain")

    return app


app = create_app()
