"""Session layer for one pump.fun chat room.

This layer is responsible for:
- Transport lifecycle and bounded reconnection
- Engine.IO/Socket.IO control frames (open, handshake, ping/pong, disconnect)
- Join -> history -> active sequencing
- Ack correlation and the bounded message history

Every failure is reported as an event; nothing here raises to the caller.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from shared.models.chat import (
    ChatMessage,
    ConnectInfo,
    GetMessageHistoryPayload,
    HandshakePayload,
    JoinRoomPayload,
    SendMessagePayload,
)
from shared.protocol.frames import (
    PING,
    PONG,
    Frame,
    FrameDecodeError,
    FrameKind,
    encode_event,
    encode_handshake,
    extract_message_list,
    parse_frame,
)

from pumpchat.config import ChatSettings
from pumpchat.events import (
    ChatEvent,
    ClientError,
    Connected,
    Disconnected,
    EventBus,
    GaveUp,
    HistoryReady,
    MessageReceived,
    Reconnecting,
    ServerError,
    UserLeft,
)
from pumpchat.history import HistoryBuffer
from pumpchat.network.correlator import AckCorrelator, AckKind
from pumpchat.network.keepalive import Keepalive
from pumpchat.network.reconnect import ReconnectPolicy
from pumpchat.network.session_state import ConnectionState, SessionTracker
from pumpchat.network.transport.base import BaseTransport, TransportClosed

LOGGER = logging.getLogger(__name__)

FrameHandler = Callable[[Frame], Awaitable[None]]


@dataclass
class Session:
    """State machine that owns the transport for a single room."""

    settings: ChatSettings
    transport_factory: Callable[[ChatSettings], BaseTransport]
    bus: EventBus = field(default_factory=EventBus)
    clock: Callable[[], float] = time.monotonic
    tracker: SessionTracker = field(default_factory=SessionTracker)

    history: HistoryBuffer = field(init=False)
    correlator: AckCorrelator = field(init=False)
    reconnect: ReconnectPolicy = field(init=False)
    keepalive: Keepalive = field(init=False)

    _transport: Optional[BaseTransport] = field(default=None, init=False, repr=False)
    _receive_task: Optional[asyncio.Task[None]] = field(default=None, init=False, repr=False)
    _reconnect_task: Optional[asyncio.Task[None]] = field(default=None, init=False, repr=False)
    _sweep_task: Optional[asyncio.Task[None]] = field(default=None, init=False, repr=False)
    _closing: bool = field(default=False, init=False, repr=False)
    _gave_up: bool = field(default=False, init=False, repr=False)
    _open_generation: int = field(default=0, init=False, repr=False)
    _frame_handlers: dict[FrameKind, FrameHandler] = field(init=False, repr=False)
    _event_handlers: dict[str, Callable[[Any], Awaitable[None]]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.history = HistoryBuffer(self.settings.history_limit)
        self.correlator = AckCorrelator(self.settings.ack_ttl_seconds, clock=self.clock)
        self.reconnect = ReconnectPolicy(
            base_delay=self.settings.reconnect_base_delay_seconds,
            max_delay=self.settings.reconnect_max_delay_seconds,
            max_attempts=self.settings.reconnect_max_attempts,
        )
        self.keepalive = Keepalive(self._send_ping)
        self._frame_handlers = {
            FrameKind.CONNECT_INFO: self._on_connect_info,
            FrameKind.HANDSHAKE: self._on_handshake_accepted,
            FrameKind.DISCONNECT: self._on_server_disconnect,
            FrameKind.EVENT: self._on_event,
            FrameKind.ACK: self._on_ack,
            FrameKind.PING: self._on_ping,
            FrameKind.PONG: self._on_pong,
        }
        self._event_handlers = {
            "setCookie": self._on_set_cookie,
            "newMessage": self._on_new_message,
            "userLeft": self._on_user_left,
        }

    # ------------------------------------------------------------------
    # Lifecycle

    @property
    def state(self) -> ConnectionState:
        return self.tracker.state

    @property
    def room_id(self) -> str:
        return self.settings.room_id

    async def connect(self) -> None:
        """Start the open -> handshake -> join -> history sequence."""

        if self.state is not ConnectionState.DISCONNECTED:
            LOGGER.debug("connect() ignored in state %s", self.state.value)
            return
        self._closing = False
        self._cancel_reconnect()
        if self.reconnect.exhausted:
            self.reconnect.reset()
        self._gave_up = False
        await self._open()

    async def disconnect(self) -> None:
        """Close the session for good; no reconnect follows."""

        self._closing = True
        self._open_generation += 1
        self._cancel_reconnect()
        self.keepalive.stop()
        await self._stop_sweeper()
        transport = self._transport
        self._transport = None
        self._try_transition(ConnectionState.DISCONNECTED)
        receive_task = self._receive_task
        self._receive_task = None
        if receive_task and receive_task is not asyncio.current_task():
            receive_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await receive_task
        if transport is None:
            return
        await self._close_quietly(transport)
        LOGGER.info("Disconnected from room %s", self.room_id)
        await self._emit(Disconnected(reason="client disconnect", by_client=True))

    async def _open(self) -> None:
        self._open_generation += 1
        generation = self._open_generation
        self._try_transition(ConnectionState.CONNECTING)
        self._ensure_sweeper()
        transport = self.transport_factory(self.settings)
        try:
            await asyncio.wait_for(transport.connect(), timeout=self.settings.connect_timeout_seconds)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            if generation != self._open_generation:
                LOGGER.debug("Superseded connection attempt to room %s failed: %s", self.room_id, exc)
                return
            LOGGER.warning("Connection to room %s failed: %s", self.room_id, exc)
            self._try_transition(ConnectionState.DISCONNECTED)
            await self._emit(ClientError(reason=f"connect failed: {exc}"))
            await self._schedule_reconnect()
            return
        if self._closing or generation != self._open_generation:
            LOGGER.debug("Discarding superseded connection to room %s", self.room_id)
            await self._close_quietly(transport)
            return

        self._transport = transport
        self.reconnect.reset()
        self._gave_up = False
        self._try_transition(ConnectionState.HANDSHAKING)
        LOGGER.info("WebSocket connected to room %s", self.room_id)
        self._receive_task = asyncio.create_task(self._receive_loop(transport), name="chat-receive")
        await self._emit(Connected(room_id=self.room_id))

    async def _receive_loop(self, transport: BaseTransport) -> None:
        reason = "connection closed"
        try:
            while self._transport is transport:
                raw = await transport.receive()
                await self.handle_frame(raw)
            return
        except asyncio.CancelledError:
            raise
        except TransportClosed as exc:
            reason = str(exc) or reason
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Receive loop error for room %s: %s", self.room_id, exc)
            reason = str(exc) or reason
        if self._transport is transport:
            await self._drop_transport(reason)

    async def _drop_transport(self, reason: str) -> None:
        """Tear down the current transport and, unless closing, schedule a reconnect."""

        transport = self._transport
        if transport is None:
            return
        self._transport = None
        self.keepalive.stop()
        self._try_transition(ConnectionState.DISCONNECTED)
        await self._close_quietly(transport)
        LOGGER.info("Connection closed for room %s: %s", self.room_id, reason)
        await self._emit(Disconnected(reason=reason))
        await self._schedule_reconnect()

    async def _schedule_reconnect(self) -> None:
        if self._closing:
            return
        delay = self.reconnect.next_delay()
        if delay is None:
            if not self._gave_up:
                self._gave_up = True
                LOGGER.error(
                    "Giving up on room %s after %s reconnect attempts",
                    self.room_id,
                    self.reconnect.attempts,
                )
                await self._stop_sweeper()
                await self._emit(GaveUp(attempts=self.reconnect.attempts))
            return
        attempt = self.reconnect.attempts
        LOGGER.info(
            "Attempting to reconnect (%s/%s) to room %s in %.1fs",
            attempt,
            self.reconnect.max_attempts,
            self.room_id,
            delay,
        )
        await self._emit(Reconnecting(attempt=attempt, delay=delay))
        self._reconnect_task = asyncio.create_task(self._reconnect_after(delay), name="chat-reconnect")

    async def _reconnect_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        if self._reconnect_task is asyncio.current_task():
            self._reconnect_task = None
        if self._closing or self.state is not ConnectionState.DISCONNECTED:
            return
        await self._open()

    def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _ensure_sweeper(self) -> None:
        if self._sweep_task and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop(), name="chat-ack-sweep")

    async def _stop_sweeper(self) -> None:
        task = self._sweep_task
        self._sweep_task = None
        if task and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _sweep_loop(self) -> None:
        interval = float(self.settings.ack_sweep_interval_seconds)
        while True:
            await asyncio.sleep(interval)
            self.correlator.sweep(self.clock())

    @staticmethod
    async def _close_quietly(transport: BaseTransport) -> None:
        try:
            await transport.close()
        except Exception:  # noqa: BLE001
            LOGGER.debug("Suppress transport close error", exc_info=True)

    def _try_transition(self, state: ConnectionState) -> None:
        if self.tracker.state is state:
            return
        try:
            self.tracker.transition(state)
        except ValueError:
            LOGGER.debug(
                "Ignoring invalid session transition %s -> %s",
                self.tracker.state.value,
                state.value,
            )

    async def _emit(self, event: ChatEvent) -> None:
        await self.bus.emit(event)

    # ------------------------------------------------------------------
    # Outbound

    async def _send(self, frame: str) -> bool:
        transport = self._transport
        if transport is None:
            LOGGER.warning("Cannot send frame: not connected")
            return False
        try:
            await transport.send(frame)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Send failed for room %s: %s", self.room_id, exc)
            if self._transport is transport:
                await self._drop_transport(f"send failed: {exc}")
            return False
        return True

    async def _send_ping(self) -> None:
        await self._send(PING)

    async def _request(self, kind: AckKind, payload: BaseModel) -> int:
        ack_id = self.correlator.allocate(kind)
        await self._send(encode_event(kind.value, payload, ack_id=ack_id))
        return ack_id

    async def send_message(self, text: str) -> bool:
        """Transmit a chat line. Delivery is confirmed only by the server's ack."""

        if self.state is not ConnectionState.ACTIVE:
            LOGGER.warning("Cannot send message: session is %s", self.state.value)
            await self._emit(ClientError(reason=f"cannot send message while {self.state.value.lower()}"))
            return False
        payload = SendMessagePayload(room_id=self.room_id, message=text, username=self.settings.username)
        await self._request(AckKind.SEND_MESSAGE, payload)
        return True

    # ------------------------------------------------------------------
    # Inbound

    async def handle_frame(self, raw: str) -> None:
        """Decode one raw frame and route it to its handler."""

        try:
            frame = parse_frame(raw)
        except FrameDecodeError as exc:
            LOGGER.warning("Discarding malformed frame: %s", exc)
            return
        if frame is None:
            LOGGER.debug("Ignoring unrecognised frame: %.40s", raw)
            return
        await self._frame_handlers[frame.kind](frame)

    async def _on_connect_info(self, frame: Frame) -> None:
        try:
            info = ConnectInfo.model_validate(frame.data)
        except ValidationError as exc:
            LOGGER.warning("Discarding invalid connect info: %s", exc)
            return
        if info.ping_interval is not None and info.ping_interval > 0:
            self.keepalive.start(info.ping_interval / 1000)
        elif info.ping_interval is not None:
            LOGGER.warning("Ignoring non-positive pingInterval: %s", info.ping_interval)
        handshake = HandshakePayload(origin=self.settings.origin, timestamp=int(time.time() * 1000))
        await self._send(encode_handshake(handshake))

    async def _on_handshake_accepted(self, frame: Frame) -> None:
        payload = JoinRoomPayload(room_id=self.room_id, username=self.settings.username)
        await self._request(AckKind.JOIN_ROOM, payload)
        self._try_transition(ConnectionState.JOINING)

    async def _on_server_disconnect(self, frame: Frame) -> None:
        reason = frame.data or "Server initiated disconnect"
        LOGGER.info("Server disconnected room %s: %s", self.room_id, reason)
        await self._drop_transport(reason)

    async def _on_ping(self, frame: Frame) -> None:
        await self._send(PONG)

    async def _on_pong(self, frame: Frame) -> None:
        return None

    async def _on_event(self, frame: Frame) -> None:
        data = frame.data
        if not isinstance(data, list) or not data or not isinstance(data[0], str):
            LOGGER.warning("Discarding malformed event frame: %.80r", data)
            return
        name = data[0]
        payload = data[1] if len(data) > 1 else None
        handler = self._event_handlers.get(name)
        if handler is None:
            LOGGER.debug("Ignoring unknown event %s", name)
            return
        await handler(payload)

    async def _on_set_cookie(self, payload: Any) -> None:
        await self._on_join_confirmed("setCookie")

    async def _on_new_message(self, payload: Any) -> None:
        try:
            message = ChatMessage.model_validate(payload)
        except ValidationError as exc:
            LOGGER.warning("Discarding invalid chat message: %s", exc)
            return
        self.history.append(message)
        await self._emit(MessageReceived(message=message))

    async def _on_user_left(self, payload: Any) -> None:
        await self._emit(UserLeft(payload=payload))

    async def _on_ack(self, frame: Frame) -> None:
        if frame.ack_id is None:
            await self._apply_history(frame.data)
            return
        kind = self.correlator.resolve(frame.ack_id)
        if kind is AckKind.JOIN_ROOM:
            await self._on_join_confirmed(f"ack {frame.ack_id}")
        elif kind is AckKind.GET_MESSAGE_HISTORY:
            await self._apply_history(frame.data)
        elif kind is AckKind.SEND_MESSAGE:
            result = frame.data[0] if isinstance(frame.data, list) and frame.data else None
            if isinstance(result, dict) and result.get("error"):
                LOGGER.error("Server rejected message for room %s: %s", self.room_id, result)
                await self._emit(ServerError(payload=result))
        elif self.state is ConnectionState.FETCHING_HISTORY:
            await self._apply_history(frame.data)
        else:
            LOGGER.debug("Unroutable ack id=%s", frame.ack_id)

    async def _on_join_confirmed(self, source: str) -> None:
        # The server confirms joins either by ack or by setCookie; act on the first.
        if self.state is not ConnectionState.JOINING:
            LOGGER.debug("Join confirmation via %s ignored in state %s", source, self.state.value)
            return
        LOGGER.info("Joined room %s (%s)", self.room_id, source)
        self._try_transition(ConnectionState.FETCHING_HISTORY)
        payload = GetMessageHistoryPayload(room_id=self.room_id, limit=self.settings.history_limit)
        await self._request(AckKind.GET_MESSAGE_HISTORY, payload)

    async def _apply_history(self, data: Any) -> None:
        raw_messages = extract_message_list(data)
        if raw_messages is None:
            LOGGER.debug("Ack payload carries no message history")
            return
        messages: list[ChatMessage] = []
        for item in raw_messages:
            try:
                messages.append(ChatMessage.model_validate(item))
            except ValidationError as exc:
                LOGGER.warning("Skipping invalid history entry: %s", exc)
        self.history.replace(messages)
        if self.state is ConnectionState.FETCHING_HISTORY:
            self._try_transition(ConnectionState.ACTIVE)
            self.reconnect.reset()
            LOGGER.info("Room %s active with %s messages of history", self.room_id, len(self.history))
        await self._emit(HistoryReady(messages=self.history.snapshot()))
