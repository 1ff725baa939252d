"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from restaurant_matchmaker.api.models import (
    CreateSessionRequest,
    JoinSessionRequest,
    SwipeRequest,
)
from restaurant_matchmaker.app_logging import configure_logging
from restaurant_matchmaker.config import parse_cuisines
from restaurant_matchmaker.containers import AppContainer
from restaurant_matchmaker.domain.errors import (
    DomainError,
    ErrorCode,
    InvalidOperationError,
)
from restaurant_matchmaker.domain.restaurants import (
    SessionFilters,
    TransactionType,
)
from restaurant_matchmaker.domain.sessions import (
    Role,
    SessionRecord,
    SwipeEntry,
)
from restaurant_matchmaker.services.candidates import get_restaurant
from restaurant_matchmaker.services.invites import generate_invite_link
from restaurant_matchmaker.services.projection import (
    SessionView,
    match_ids,
    project_session,
    role_for,
)

_STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.BUDGET_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_OPERATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PERSISTENCE_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        if exc.code is ErrorCode.PERSISTENCE_ERROR:
            logger.warning("Request failed: %s", exc, extra={"path": request.url.path})
        return JSONResponse(
            status_code=_STATUS_BY_CODE[exc.code],
            content={"error": exc.code.value, "message": exc.message},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/candidates")
    async def preview_candidates(
        request: Request,
        cuisines: str | None = None,
        price: str | None = None,
        transaction_type: TransactionType = TransactionType.ANY,
    ) -> dict[str, object]:
        """Preview the candidates a session with these filters would get."""
        state_container: AppContainer = request.app.state.container
        filters = SessionFilters(
            cuisines=parse_cuisines(cuisines),
            price_range=tuple(p.strip() for p in (price or "").split(",") if p.strip()),
            transaction_type=transaction_type,
        )
        restaurants = await state_container.candidate_service.fetch_candidates(filters)
        return {"candidates": jsonable_encoder(restaurants)}

    @app.post("/sessions", status_code=status.HTTP_201_CREATED)
    async def create_session(
        body: CreateSessionRequest, request: Request
    ) -> dict[str, object]:
        """Build a candidate set and open a session for a partner to join."""
        state_container: AppContainer = request.app.state.container
        location = body.location.to_domain() if body.location else None
        filters = body.filters.to_domain(location)
        restaurants = await state_container.candidate_service.fetch_candidates(
            filters, location
        )
        session_id = await state_container.session_coordinator.create_session(
            body.device_id, filters, [r.id for r in restaurants], restaurants
        )
        return {
            "session_id": session_id,
            "invite_link": _invite_link(state_container, session_id),
            "candidates": jsonable_encoder(restaurants),
        }

    @app.get("/sessions/{session_id}")
    async def get_session(
        session_id: str, request: Request, device_id: str | None = None
    ) -> dict[str, object]:
        """Return the session and, for a device, its derived view."""
        state_container: AppContainer = request.app.state.container
        coordinator = state_container.session_coordinator
        session = await coordinator.get_session(session_id)
        payload: dict[str, object] = {"session": _session_payload(session)}
        if device_id:
            swipes = await coordinator.list_swipes(session_id)
            view = project_session(
                session, swipes, device_id, max_swipes=coordinator.max_swipes
            )
            payload["view"] = _view_payload(view)
        return payload

    @app.get("/sessions/{session_id}/candidates")
    async def list_candidates(session_id: str, request: Request) -> dict[str, object]:
        """Return the session's candidate records in their fixed order."""
        state_container: AppContainer = request.app.state.container
        coordinator = state_container.session_coordinator
        restaurants = await coordinator.get_candidates(session_id)
        return {"candidates": jsonable_encoder(restaurants)}

    @app.post("/sessions/{session_id}/join")
    async def join_session(
        session_id: str, body: JoinSessionRequest, request: Request
    ) -> dict[str, object]:
        """Join a session as the partner."""
        state_container: AppContainer = request.app.state.container
        coordinator = state_container.session_coordinator
        joined = await coordinator.join_session(session_id, body.device_id)
        session = await coordinator.get_session(session_id)
        return {"joined": joined, "session": _session_payload(session)}

    @app.post("/sessions/{session_id}/swipes")
    async def record_swipe(
        session_id: str, body: SwipeRequest, request: Request
    ) -> dict[str, object]:
        """Record a vote for the calling device's role."""
        state_container: AppContainer = request.app.state.container
        coordinator = state_container.session_coordinator
        session = await coordinator.get_session(session_id)
        role = role_for(session, body.device_id)
        if role is None:
            raise InvalidOperationError("Device is not part of this session")
        is_match = await coordinator.record_swipe(
            session_id,
            body.candidate_id,
            body.device_id,
            is_creator=role is Role.CREATOR,
            direction=body.direction,
        )
        session = await coordinator.get_session(session_id)
        swipes = await coordinator.list_swipes(session_id)
        view = project_session(
            session, swipes, body.device_id, max_swipes=coordinator.max_swipes
        )
        return {"is_match": is_match, "view": _view_payload(view)}

    @app.post("/sessions/{session_id}/end")
    async def end_session(session_id: str, request: Request) -> dict[str, object]:
        """End a session early."""
        state_container: AppContainer = request.app.state.container
        coordinator = state_container.session_coordinator
        await coordinator.end_session(session_id)
        session = await coordinator.get_session(session_id)
        return {"session": _session_payload(session)}

    @app.get("/sessions/{session_id}/matches")
    async def list_matches(session_id: str, request: Request) -> dict[str, object]:
        """Return matched candidates in candidate order, with their records."""
        state_container: AppContainer = request.app.state.container
        coordinator = state_container.session_coordinator
        session = await coordinator.get_session(session_id)
        swipes = await coordinator.list_swipes(session_id)
        candidates = await coordinator.get_candidates(session_id)
        matched = match_ids(session, swipes)
        restaurants = [get_restaurant(candidates, cid) for cid in matched]
        return {
            "matches": list(matched),
            "restaurants": jsonable_encoder([r for r in restaurants if r]),
        }

    @app.get("/invites/{session_id}")
    async def invite(session_id: str, request: Request) -> dict[str, str]:
        """Return the shareable invite link for an existing session."""
        state_container: AppContainer = request.app.state.container
        await state_container.session_coordinator.get_session(session_id)
        return {
            "session_id": session_id,
            "invite_link": _invite_link(state_container, session_id),
        }

    @app.websocket("/sessions/{session_id}/events")
    async def session_events(websocket: WebSocket, session_id: str) -> None:
        """Stream session and ledger snapshots until the client disconnects."""
        state_container: AppContainer = websocket.app.state.container
        coordinator = state_container.session_coordinator
        await websocket.accept()
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[dict[str, object]] = asyncio.Queue()

        def push(message: dict[str, object]) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, message)

        def on_session(session: SessionRecord | None) -> None:
            push(
                {
                    "type": "session",
                    "session": _session_payload(session) if session else None,
                }
            )

        def on_swipes(swipes: list[SwipeEntry]) -> None:
            push({"type": "swipes", "swipes": [_swipe_payload(s) for s in swipes]})

        session_subscription = await coordinator.subscribe_to_session(
            session_id, on_session
        )
        swipes_subscription = await coordinator.subscribe_to_swipes(
            session_id, on_swipes
        )

        async def forward() -> None:
            while True:
                await websocket.send_json(await queue.get())

        sender = asyncio.create_task(forward())
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("Session observer disconnected: %s", session_id)
        finally:
            sender.cancel()
            with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
                await sender
            session_subscription.unsubscribe()
            swipes_subscription.unsubscribe()

    return app


def _invite_link(state_container: AppContainer, session_id: str) -> str:
    return generate_invite_link(session_id, state_container.settings.invite_base_url)


def _session_payload(session: SessionRecord) -> dict[str, object]:
    return jsonable_encoder(session)


def _swipe_payload(entry: SwipeEntry) -> dict[str, object]:
    payload = jsonable_encoder(entry)
    payload["is_match"] = entry.is_match
    return payload


def _view_payload(view: SessionView) -> dict[str, object]:
    payload = jsonable_encoder(asdict(view))
    payload["remaining_swipes"] = view.remaining_swipes
    return payload
