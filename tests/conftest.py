"""Shared fixtures for the pairroom test suite."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure the project root is on sys.path so 'pairroom' package resolves
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# ---------------------------------------------------------------------------
# Recording Socket.IO server
# ---------------------------------------------------------------------------

class FakeSocketServer:
    """Stands in for ``socketio.AsyncServer``: records handlers and emissions.

    ``emitted`` holds ``(event, data, to)`` tuples in emission order.
    Connection ids listed in ``fail_for`` make ``emit`` raise, like a
    socket that closed mid-broadcast.
    """

    def __init__(self):
        self.handlers: dict = {}
        self.emitted: list[tuple] = []
        self.fail_for: set[str] = set()

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler
        return handler

    async def emit(self, event, data=None, to=None, room=None, skip_sid=None,
                   namespace=None, callback=None):
        target = to or room
        if target in self.fail_for:
            raise RuntimeError(f"socket {target} is closed")
        self.emitted.append((event, data, target))

    def received(self, sid: str, event: str | None = None) -> list:
        """Everything delivered to *sid*, optionally filtered by event name."""
        return [
            (e, d) for e, d, to in self.emitted
            if to == sid and (event is None or e == event)
        ]

    def payloads(self, sid: str, event: str) -> list:
        return [d for _, d in self.received(sid, event)]

    def clear(self):
        self.emitted.clear()


@pytest.fixture
def fake_sio():
    return FakeSocketServer()


@pytest.fixture
def registry():
    from pairroom.room_registry import RoomRegistry
    return RoomRegistry()


@pytest.fixture
def router(fake_sio, registry):
    from pairroom.broadcast import BroadcastRouter
    return BroadcastRouter(fake_sio, registry)


@pytest.fixture
def reconciler(registry, router):
    from pairroom.reconciler import DisconnectReconciler
    return DisconnectReconciler(registry, router)


@pytest.fixture
def gateway(fake_sio, registry):
    from pairroom.session_gateway import SessionGateway
    gw = SessionGateway(fake_sio, registry=registry)
    gw.register()
    return gw


# ---------------------------------------------------------------------------
# REST app
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_exercise():
    """A minimal exercise dict matching the shape served by the API."""
    return {
        "title": "Test Sum",
        "description": "Return the sum of a and b.",
        "initialCode": "function sum(a, b) {\n    // Your code here\n}\n",
        "solution": "function sum(a, b) {\n    return a + b;\n}\n",
        "hints": [{"text": "Use the + operator.", "code": "return a + b;"}],
    }


@pytest.fixture
def app(sample_exercise):
    """The FastAPI app with the exercise catalogue replaced by a known sample."""
    summaries = [{
        "title": sample_exercise["title"],
        "description": sample_exercise["description"],
        "initialCode": sample_exercise["initialCode"],
    }]
    with patch("pairroom.server.list_exercises", return_value=summaries), \
         patch("pairroom.server.get_exercise",
               side_effect=lambda title: sample_exercise if title == sample_exercise["title"] else None):
        from pairroom.server import app as fastapi_app
        yield fastapi_app


@pytest.fixture
async def client(app):
    """Async HTTP client for testing REST endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
