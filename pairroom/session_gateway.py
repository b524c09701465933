"""Socket.IO event gateway: routes per-connection events into the room core.

The main entry point is ``SessionGateway.register()``, which installs the
handlers on a python-socketio ``AsyncServer``. Each inbound event type is
handled by a ``handle_<event>`` method; the dispatcher validates nothing
itself but contains every failure so one bad event never reaches other
connections or rooms.
"""

import asyncio
import logging

from pydantic import ValidationError

from .broadcast import BroadcastRouter, ChatMessage
from .payloads import CodeChangePayload, JoinRoomPayload, SendMessagePayload
from .reconciler import DisconnectReconciler
from .roles import label_of, role_of
from .room_registry import RoomRegistry
from .ws_constants import (
    EVT_CODE_CHANGE,
    EVT_CONNECT,
    EVT_DISCONNECT,
    EVT_JOIN_ROOM,
    EVT_SEND_MESSAGE,
)

logger = logging.getLogger(__name__)


class SessionGateway:
    """Holds the room core for one server process.

    All handlers run behind a single ``asyncio.Lock`` so each event (the
    registry mutation and its fan-out) completes before the next one
    starts. That makes per-room delivery order equal arrival order.
    """

    def __init__(
        self,
        sio,
        *,
        registry: RoomRegistry | None = None,
        router: BroadcastRouter | None = None,
        reconciler: DisconnectReconciler | None = None,
    ):
        self.sio = sio
        # An empty RoomRegistry is falsy (__len__), so test for None explicitly.
        self.registry = registry if registry is not None else RoomRegistry()
        self.router = router if router is not None else BroadcastRouter(sio, self.registry)
        if reconciler is None:
            reconciler = DisconnectReconciler(self.registry, self.router)
        self.reconciler = reconciler
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def handle_join_room(self, sid: str, data) -> None:
        payload = JoinRoomPayload.parse_event(data)

        previous = self.registry.room_of(sid)
        if previous is not None and previous != payload.room_id:
            # A connection belongs to one room at a time.
            logger.info("Connection %s switching from room %r to %r", sid, previous, payload.room_id)
            await self.reconciler.reconcile(sid)

        result = self.registry.join(payload.room_id, sid)
        await self.router.role_assigned(sid, result.is_mentor)
        await self.router.presence(payload.room_id)

    async def handle_code_change(self, sid: str, data) -> None:
        payload = CodeChangePayload.model_validate(data)
        if not self.registry.is_member(payload.room_id, sid):
            logger.debug("Ignoring code-change from %s: not a member of %r", sid, payload.room_id)
            return
        await self.router.code_update(payload.room_id, payload.code, sid)

    async def handle_send_message(self, sid: str, data) -> None:
        payload = SendMessagePayload.model_validate(data)
        if not self.registry.is_member(payload.room_id, sid):
            logger.debug("Ignoring send-message from %s: not a member of %r", sid, payload.room_id)
            return
        # The registry, not the client, decides who speaks as mentor.
        role = role_of(self.registry.mentor_of(payload.room_id) == sid)
        if role != payload.role:
            logger.debug("Connection %s claimed role %r in %r, sending as %r", sid, payload.role, payload.room_id, role)
        message = ChatMessage(
            message=payload.message,
            sender=payload.sender or label_of(role),
            role=role,
            sender_id=sid,
        )
        await self.router.chat(payload.room_id, message)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def on_connect(self, sid: str, environ: dict, auth=None) -> None:
        logger.info("Client connected: %s", sid)

    async def on_disconnect(self, sid: str, reason=None) -> None:
        logger.info("Client disconnected: %s (%s)", sid, reason or "transport closed")
        async with self._lock:
            try:
                await self.reconciler.reconcile(sid)
            except Exception:
                logger.exception("Unexpected error reconciling disconnect of %s", sid)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    # Dispatch table: event name -> handler method name
    _HANDLERS = {
        EVT_JOIN_ROOM: "handle_join_room",
        EVT_CODE_CHANGE: "handle_code_change",
        EVT_SEND_MESSAGE: "handle_send_message",
    }

    async def dispatch(self, event: str, sid: str, data=None) -> None:
        handler_name = self._HANDLERS.get(event)
        if not handler_name:
            logger.warning("No handler for event %r from %s", event, sid)
            return

        async with self._lock:
            try:
                await getattr(self, handler_name)(sid, data)
            except ValidationError as e:
                logger.warning("Dropping malformed %s from %s: %s", event, sid, e.errors(include_url=False))
            except Exception:
                logger.exception("Unexpected error handling event=%s from %s", event, sid)

    def _make_handler(self, event: str):
        async def _handler(sid, *args):
            await self.dispatch(event, sid, args[0] if args else None)
        return _handler

    def register(self) -> None:
        """Install the gateway's handlers on the Socket.IO server."""
        self.sio.on(EVT_CONNECT, self.on_connect)
        self.sio.on(EVT_DISCONNECT, self.on_disconnect)
        for event in self._HANDLERS:
            self.sio.on(event, self._make_handler(event))
