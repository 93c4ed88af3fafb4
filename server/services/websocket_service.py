# server/services/websocket_service.py
"""WebSocket connection management and message handling."""

import asyncio
import logging
import uuid
from collections import deque
from typing import Deque, Dict

from fastapi import WebSocket, WebSocketDisconnect

from models.messages import (
    EndGame,
    JoinGame,
    OutboundMessage,
    PlayerMovement,
    RestartGame,
    Shoot,
    ToggleMute,
    parse_inbound,
)
from .game_service import GameService

logger = logging.getLogger(__name__)

SNAPSHOT_TYPE = "gameState"


class ConnectionOutbox:
    """Frames waiting to be sent to one client.

    Event frames are kept in publish order. Only the newest ``gameState`` is
    kept: a new snapshot replaces any one still waiting.
    """

    def __init__(self):
        self._frames: Deque[OutboundMessage] = deque()
        self._ready = asyncio.Event()

    def __len__(self):
        return len(self._frames)

    def put(self, message: OutboundMessage):
        if message.type == SNAPSHOT_TYPE:
            self._frames = deque(m for m in self._frames if m.type != SNAPSHOT_TYPE)
        self._frames.append(message)
        self._ready.set()

    async def get(self) -> OutboundMessage:
        while not self._frames:
            self._ready.clear()
            await self._ready.wait()
        return self._frames.popleft()


class WebSocketService:
    """Manages WebSocket connections and message routing.

    Game events are queued per connection as they are published. Each
    connection has its own sender task, so the simulation never waits on a
    socket and a slow client only delays itself.
    """

    def __init__(self, game_service: GameService):
        self.game_service = game_service
        self.connections: Dict[str, WebSocket] = {}
        self.outboxes: Dict[str, ConnectionOutbox] = {}
        self._senders: Dict[str, asyncio.Task] = {}
        self.game_service.subscribe(self._enqueue)

    def start_background_tasks(self):
        """Start the simulation."""
        if not self.game_service.running:
            self.game_service.start()

    async def stop_background_tasks(self):
        """Stop the simulation and every sender."""
        self.game_service.stop()
        for connection_id in list(self._senders):
            await self._stop_sender(connection_id)

    async def handle_connection(self, websocket: WebSocket):
        """Handle a new WebSocket connection."""
        await websocket.accept()
        connection_id = str(uuid.uuid4())
        outbox = ConnectionOutbox()
        self.connections[connection_id] = websocket
        self.outboxes[connection_id] = outbox
        self._senders[connection_id] = asyncio.create_task(
            self._send_loop(connection_id, websocket, outbox)
        )
        logger.info("A user connected: %s (%s)", connection_id, websocket.client)

        try:
            await self._handle_client_messages(websocket, connection_id)
        except WebSocketDisconnect:
            pass
        finally:
            self._handle_disconnect(connection_id)
            await self._stop_sender(connection_id)

    async def _handle_client_messages(self, websocket: WebSocket, connection_id: str):
        """Handle incoming messages from a client."""
        while True:
            raw = await websocket.receive_text()
            message = parse_inbound(raw)
            if message is not None:
                self._process_message(connection_id, message)

    def _process_message(self, connection_id: str, message):
        """Route a validated message to the game."""
        if isinstance(message, JoinGame):
            self.game_service.join(connection_id, message.name)
        elif isinstance(message, PlayerMovement):
            self.game_service.update_input(connection_id, message.held_directions())
        elif isinstance(message, Shoot):
            self.game_service.shoot(connection_id, message.angle)
        elif isinstance(message, RestartGame):
            self.game_service.restart()
        elif isinstance(message, EndGame):
            self.game_service.end_game()
        elif isinstance(message, ToggleMute):
            self.game_service.toggle_mute(connection_id, message.muted)

    def _handle_disconnect(self, connection_id: str):
        """Handle client disconnection."""
        self.outboxes.pop(connection_id, None)
        if self.connections.pop(connection_id, None) is not None:
            self.game_service.disconnect(connection_id)

    async def _stop_sender(self, connection_id: str):
        sender = self._senders.pop(connection_id, None)
        if sender is None:
            return
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass

    def _enqueue(self, message: OutboundMessage):
        """Route a published event into the outbox of each recipient."""
        if message.target is not None:
            recipients = [message.target]
        else:
            recipients = [cid for cid in self.outboxes if cid != message.exclude]

        for connection_id in recipients:
            outbox = self.outboxes.get(connection_id)
            if outbox is not None:
                outbox.put(message)

    async def _send_loop(self, connection_id: str, websocket: WebSocket, outbox: ConnectionOutbox):
        """Send one client's frames in order until its socket fails."""
        while True:
            message = await outbox.get()
            try:
                await websocket.send_json(message.to_wire())
            except Exception as e:
                logger.warning("Send to %s failed: %s", connection_id, e)
                self._senders.pop(connection_id, None)
                self._handle_disconnect(connection_id)
                return
