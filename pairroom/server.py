import logging
import os

import socketio
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .exercises import EXERCISES, get_exercise, list_exercises
from .room_registry import RoomRegistry
from .session_gateway import SessionGateway

logger = logging.getLogger(__name__)

app = FastAPI(title="pairroom")

# --- CORS Configuration ---

_DEFAULT_CORS_ORIGIN = "http://localhost:3000"


def _get_cors_origins() -> list[str]:
    """Get CORS origins from environment variable or use default."""
    cors_origins_str = os.environ.get("PAIRROOM_CORS_ORIGINS", _DEFAULT_CORS_ORIGIN)
    origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
    return origins if origins else [_DEFAULT_CORS_ORIGIN]


_cors_origins = _get_cors_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Authorization"],
)

# --- Realtime rooms ---

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=_cors_origins)
room_registry = RoomRegistry()
gateway = SessionGateway(sio, registry=room_registry)
gateway.register()

# Socket.IO answers on /socket.io/, everything else falls through to FastAPI.
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


@app.on_event("startup")
async def startup_event():
    logger.info("Serving %d exercises; CORS origins: %s", len(EXERCISES), ", ".join(_cors_origins))


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down with %d active rooms", len(room_registry))


# --- API Routes ---

@app.get("/api/health")
async def api_health():
    return {"status": "ok"}


@app.get("/api/code-blocks")
async def api_list_code_blocks():
    return list_exercises()


@app.get("/api/code-blocks/{title}")
async def api_get_code_block(title: str):
    exercise = get_exercise(title)
    if not exercise:
        raise HTTPException(status_code=404, detail="Code block not found")
    return exercise


@app.get("/api/rooms/{room_id}")
async def api_room_status(room_id: str):
    snapshot = room_registry.snapshot(room_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return snapshot
