"""
FastAPI server for the value cards game: WebSocket play channel plus REST reads.
"""

import logging
import os
import uuid
from collections import defaultdict
from typing import Dict, Optional, Set

import orjson
from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..catalog import CardCatalog, load_catalog
from ..diff import compute_diff, should_send_full_state
from ..errors import DataError, GameError, PlayerNotFound, RoomNotFound
from ..models import Room
from ..room_service import RoomService
from ..rules import create_config
from ..serialization import analysis_to_dict, sanitize_state
from .events import (
    CreateEvent, DiscardEvent, DrawDeckEvent, DrawDiscardEvent, ErrorCode,
    JoinEvent, RequestStateEvent, SkipEvent, StartEvent, create_error_event,
    create_join_success_event, create_state_full_event, create_state_patch_event,
    parse_inbound_event
)

CATALOG_ENV = "VALUECARDS_CARD_CATALOG"

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(title="Value Cards Game Engine", version="1.0.0")

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global state
service = RoomService(config=create_config())
catalog: Optional[CardCatalog] = None
room_connections: Dict[str, Set[WebSocket]] = defaultdict(set)
connection_players: Dict[WebSocket, Optional[str]] = {}
connection_rooms: Dict[WebSocket, Optional[str]] = {}
player_states: Dict[str, Room] = {}  # Last state sent to each player, for diffing


def get_catalog() -> Optional[CardCatalog]:
    """Return the card catalog, loading it from the configured path on first use."""
    global catalog
    if catalog is None:
        path = os.getenv(CATALOG_ENV)
        if path:
            catalog = load_catalog(path)
    return catalog


async def _send(websocket: WebSocket, event: BaseModel):
    await websocket.send_text(orjson.dumps(event.model_dump(mode="json")).decode())


class ConnectionManager:
    """Manages WebSocket connections and broadcasting."""

    async def connect(self, websocket: WebSocket, room_code: str, player_id: str):
        """Connect a player to a room, leaving any room the socket was in."""
        if websocket in connection_rooms:
            self.disconnect(websocket)
        room_connections[room_code].add(websocket)
        connection_players[websocket] = player_id
        connection_rooms[websocket] = room_code
        logger.info(f"Player {player_id} connected to room {room_code}")

    def disconnect(self, websocket: WebSocket):
        """Disconnect a player from their room."""
        player_id = connection_players.pop(websocket, None)
        room_code = connection_rooms.pop(websocket, None)

        if room_code and websocket in room_connections.get(room_code, set()):
            room_connections[room_code].remove(websocket)
            if not room_connections[room_code]:
                del room_connections[room_code]

        if player_id:
            player_states.pop(f"{player_id}_{room_code}", None)
            logger.info(f"Player {player_id} disconnected from room {room_code}")

        return player_id, room_code

    async def send_state(self, websocket: WebSocket, room: Room):
        """Send a room update personalized for the connection's player."""
        player_id = connection_players.get(websocket)
        key = f"{player_id}_{room.code}"
        previous = player_states.get(key)
        ops = compute_diff(previous, room, player_id)
        player_states[key] = room

        if previous is None or should_send_full_state(ops):
            await _send(websocket, create_state_full_event(sanitize_state(room, player_id)))
        elif ops:
            await _send(websocket, create_state_patch_event(room.version, ops))

    async def broadcast_state(self, room: Room):
        """Send the new room state to every connection in the room."""
        for websocket in list(room_connections.get(room.code, set())):
            try:
                await self.send_state(websocket, room)
            except Exception as e:
                logger.error(f"Error broadcasting to {connection_players.get(websocket)}: {e}")
                # Remove dead connection
                self.disconnect(websocket)
                connections = room_connections.get(room.code)
                if connections is not None:
                    connections.discard(websocket)
                    if not connections:
                        del room_connections[room.code]


manager = ConnectionManager()


def _http_status(error: GameError) -> int:
    if isinstance(error, (RoomNotFound, PlayerNotFound)):
        return 404
    if isinstance(error, DataError):
        return 422
    return 409


@app.exception_handler(GameError)
async def game_error_handler(request: Request, error: GameError):
    return JSONResponse(
        status_code=_http_status(error),
        content={"code": error.code, "message": error.message},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "connections": sum(len(conns) for conns in room_connections.values())
    }


@app.get("/rooms/{room_code}")
async def get_room_state(room_code: str, viewer: Optional[str] = None):
    """Sanitized room state as seen by ``viewer``."""
    return sanitize_state(service.get_room(room_code), viewer)


@app.get("/rooms/{room_code}/analysis/{player_id}")
async def get_player_analysis(room_code: str, player_id: str):
    """Axis scores for one player of a finished room."""
    card_catalog = get_catalog()
    if card_catalog is None:
        raise HTTPException(status_code=503, detail="Card catalog is not configured")
    analysis = service.analyze_player(room_code, player_id, card_catalog)
    return analysis_to_dict(analysis)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Main WebSocket endpoint."""
    await websocket.accept()
    logger.info("WebSocket connection accepted")

    try:
        while True:
            raw_data = await websocket.receive_text()

            try:
                event = parse_inbound_event(orjson.loads(raw_data))
                await handle_event(websocket, event)
            except GameError as e:
                logger.info(f"Rejected event from {connection_players.get(websocket)}: {e}")
                await _send(websocket, create_error_event(e.code, e.message))
            except (ValueError, orjson.JSONDecodeError) as e:
                # Invalid event
                await _send(websocket, create_error_event(ErrorCode.INVALID_EVENT, str(e)))
            except Exception:
                logger.exception("Error handling event")
                await _send(websocket, create_error_event(ErrorCode.INTERNAL, "Internal server error"))

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
    finally:
        manager.disconnect(websocket)


async def handle_event(websocket: WebSocket, event):
    """Handle an inbound event."""
    if isinstance(event, CreateEvent):
        await handle_create(websocket, event)
    elif isinstance(event, JoinEvent):
        await handle_join(websocket, event)
    elif isinstance(event, RequestStateEvent):
        await handle_request_state(websocket)
    else:
        await handle_turn_action(websocket, event)


async def _enter_room(websocket: WebSocket, room: Room, player_id: str):
    await manager.connect(websocket, room.code, player_id)
    await _send(websocket, create_join_success_event(player_id, room.code))
    await manager.broadcast_state(room)


async def handle_create(websocket: WebSocket, event: CreateEvent):
    """Handle create room event."""
    player_id = str(uuid.uuid4())
    room = service.create_room(event.room_code, player_id, event.name, event.card_count)
    await _enter_room(websocket, room, player_id)


async def handle_join(websocket: WebSocket, event: JoinEvent):
    """Handle join room event."""
    player_id = event.player_id or str(uuid.uuid4())
    room = service.join_room(event.room_code, player_id, event.name)
    await _enter_room(websocket, room, player_id)


async def handle_request_state(websocket: WebSocket):
    player_id = connection_players.get(websocket)
    room_code = connection_rooms.get(websocket)
    if not player_id or not room_code:
        await _send(websocket, create_error_event(ErrorCode.ACTION_NOT_ALLOWED, "Not in a room"))
        return
    room = service.get_room(room_code)
    player_states[f"{player_id}_{room_code}"] = room
    await _send(websocket, create_state_full_event(sanitize_state(room, player_id)))


async def handle_turn_action(websocket: WebSocket, event):
    """Handle start, draw, discard and skip events for the connection's player."""
    player_id = connection_players.get(websocket)
    room_code = connection_rooms.get(websocket)

    if not player_id or not room_code:
        await _send(websocket, create_error_event(ErrorCode.ACTION_NOT_ALLOWED, "Not in a room"))
        return

    if isinstance(event, StartEvent):
        room = service.start_game(room_code, player_id)
    elif isinstance(event, DrawDeckEvent):
        room = service.draw_from_deck(room_code, player_id)
    elif isinstance(event, DrawDiscardEvent):
        room = service.draw_from_discard(
            room_code, player_id, event.from_player_id, event.card_index, event.expected_card_id
        )
    elif isinstance(event, DiscardEvent):
        room = service.discard_card(room_code, player_id, event.card_id, event.delay_sec)
    elif isinstance(event, SkipEvent):
        room = service.skip_player(room_code, player_id)
    else:
        raise ValueError(f"Unhandled event type: {type(event)}")

    await manager.broadcast_state(room)


def reset_state():
    """Drop all rooms and connections (used by tests and restarts)."""
    global service
    service = RoomService(config=create_config())
    room_connections.clear()
    connection_players.clear()
    connection_rooms.clear()
    player_states.clear()


# Main entry point for module execution
if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host="0.0.0.0", port=port)
