"""Game API routes."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from content.factory import ProviderFactory
from match_engine.executor import UnknownCardError
from web.api.session_manager import (
    GameSession,
    SessionNotReadyError,
    session_manager,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["games"])


# Request/Response models
class CreateGameRequest(BaseModel):
    """Request to create a new game."""

    provider: str | None = Field(None, description="Content provider (defaults to server setting)")
    seed: int | None = Field(None, description="Shuffle seed for reproducible layouts")
    wait: bool = Field(True, description="If True, respond once the deck is dealt")


class ActivateRequest(BaseModel):
    """Request to flip a card."""

    card_id: str = Field(..., description="Id of the card to flip")


class RestartRequest(BaseModel):
    """Request to restart (or retry) a game."""

    wait: bool = Field(True, description="If True, respond once the new deck is dealt")


class ProviderInfo(BaseModel):
    """Information about an available content provider."""

    name: str
    description: str


def _get_session_or_404(game_id: str) -> GameSession:
    session = session_manager.get_session(game_id)
    if not session:
        raise HTTPException(status_code=404, detail="Game not found")
    return session


# REST Endpoints


@router.get("/providers", response_model=list[ProviderInfo])
async def list_providers():
    """List available content providers."""
    providers = ProviderFactory().list_providers()
    return [ProviderInfo(name=name, description=desc) for name, desc in providers.items()]


@router.post("/games", response_model=dict)
async def create_game(request: CreateGameRequest):
    """Create a new game session and start dealing its deck."""
    try:
        session = session_manager.create_session(
            provider_name=request.provider,
            seed=request.seed,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session.start_initialization()
    if request.wait:
        await session.wait_until_settled()

    return {
        "game_id": session.id,
        "state": session.to_client_state(),
    }


@router.get("/games", response_model=list[dict])
async def list_games():
    """List all active game sessions."""
    return session_manager.list_sessions()


@router.get("/games/{game_id}")
async def get_game(game_id: str):
    """Get current state of a game."""
    session = _get_session_or_404(game_id)
    return {"state": session.to_client_state()}


@router.post("/games/{game_id}/activate")
async def activate_card(game_id: str, request: ActivateRequest):
    """Flip a card. Resolution of a completed pair follows after a delay."""
    session = _get_session_or_404(game_id)

    try:
        session.activate(request.card_id)
    except SessionNotReadyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except UnknownCardError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"state": session.to_client_state()}


@router.post("/games/{game_id}/restart")
async def restart_game(game_id: str, request: RestartRequest | None = None):
    """Discard the game and deal a fresh deck (also retries a failed deal)."""
    session = _get_session_or_404(game_id)
    wait = request.wait if request is not None else True
    await session.restart(wait=wait)
    return {"state": session.to_client_state()}


@router.delete("/games/{game_id}")
async def delete_game(game_id: str):
    """Delete a game session."""
    if await session_manager.delete_session(game_id):
        return {"deleted": True}
    raise HTTPException(status_code=404, detail="Game not found")


# WebSocket endpoint for real-time game play


@router.websocket("/ws/game/{game_id}")
async def game_websocket(websocket: WebSocket, game_id: str):
    """WebSocket endpoint for real-time game updates.

    Protocol:
    Server -> Client messages:
        - game_state: Full state snapshot (sent on every change)
        - error: Error message

    Client -> Server messages:
        - activate: {card_id: str} - Flip a card
        - restart: Deal a fresh deck (also the retry action)
        - get_state: Request current state
    """
    logger.info(f"WebSocket connection: game_id={game_id}")

    session = session_manager.get_session(game_id)
    if not session:
        logger.warning(f"WebSocket: Game not found: {game_id}")
        await websocket.close(code=4004, reason="Game not found")
        return

    await websocket.accept()

    # Engine events arrive from timer callbacks; queue them for sending
    event_queue: asyncio.Queue = asyncio.Queue()
    session.add_listener(event_queue.put_nowait)

    async def forward_events():
        while True:
            event = await event_queue.get()
            await websocket.send_json(event)

    event_task = asyncio.create_task(forward_events())

    try:
        await websocket.send_json({
            "type": "game_state",
            "state": session.to_client_state(),
        })

        while True:
            data = await websocket.receive_json()
            msg_type = data.get("type", "")

            if msg_type == "activate":
                card_id = data.get("card_id")
                if not isinstance(card_id, str):
                    await websocket.send_json({
                        "type": "error",
                        "message": "card_id is required",
                    })
                    continue
                try:
                    session.activate(card_id)
                except (SessionNotReadyError, UnknownCardError) as e:
                    await websocket.send_json({
                        "type": "error",
                        "message": str(e),
                    })

            elif msg_type == "restart":
                await session.restart(wait=False)

            elif msg_type == "get_state":
                await websocket.send_json({
                    "type": "game_state",
                    "state": session.to_client_state(),
                })

            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {msg_type}",
                })

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: game_id={game_id}")
    finally:
        session.remove_listener(event_queue.put_nowait)
        event_task.cancel()
        try:
            await event_task
        except (asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
            pass
