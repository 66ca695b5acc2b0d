"""Streaming client: one websocket session per vehicle."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import aiohttp

from pyfla._constants import USER_AGENT
from pyfla.config import FlaConfig
from pyfla.exceptions import FlaStreamingClosedError, FlaStreamingError, FlaTransportError
from pyfla.models.streaming import (
    ErrorMessage,
    HelloMessage,
    StreamingFrame,
    SubscribeMessage,
    parse_server_message,
)
from pyfla.streaming.codec import StreamingUpdate, decode_frame, resolve_fields

_logger = logging.getLogger(__name__)

_CLOSED_TYPES = (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED)


class VehicleStream:
    """Live telemetry session for one vehicle.

    Usage::

        async with client.stream(vehicle_id, ["soc", "charging_state"]) as stream:
            async for update in stream:
                print(update["soc"].as_int())

    The field list is negotiated once; every frame is decoded against the
    list the server acknowledged.  Any protocol violation closes the
    session.  Reconnecting means opening a new :class:`VehicleStream`,
    which starts a fresh sequence.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        config: FlaConfig,
        vehicle_id: int,
        fields: Iterable[str],
    ) -> None:
        self._http = http_session
        self._config = config
        self._vehicle_id = vehicle_id
        self._requested = tuple(fields)
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._fields: tuple[str, ...] = ()
        self._connection_timeout: int | None = None
        self._last_seq = 0

    @property
    def vehicle_id(self) -> int:
        return self._vehicle_id

    @property
    def fields(self) -> tuple[str, ...]:
        """Field order acknowledged by the server (empty before :meth:`open`)."""
        return self._fields

    @property
    def connection_timeout(self) -> int | None:
        return self._connection_timeout

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Connect, subscribe, and wait for the acknowledgement."""
        # Fail locally on names the server would reject.
        resolve_fields(self._requested)

        headers = {"user-agent": USER_AGENT}
        if self._config.access_token:
            headers["authorization"] = f"Bearer {self._config.access_token}"
        url = self._config.streaming_url
        try:
            self._ws = await self._http.ws_connect(url, headers=headers)
        except aiohttp.ClientError as exc:
            raise FlaTransportError(f"Streaming connect to {url} failed: {exc}", endpoint=url) from exc

        subscribe = SubscribeMessage(
            vehicle_id=self._vehicle_id,
            fields=list(self._requested),
            token=self._config.access_token or None,
        )
        try:
            await self._ws.send_str(subscribe.dump())
            try:
                message = await self._receive(self._config.request_timeout)
            except TimeoutError as exc:
                raise FlaStreamingError(f"No acknowledgement from {url} for vehicle {self._vehicle_id}") from exc
            if isinstance(message, ErrorMessage):
                raise FlaStreamingClosedError(message.value or message.error_type, error_type=message.error_type)
            if not isinstance(message, HelloMessage):
                raise FlaStreamingError(f"Expected control:hello, got {message.msg_type}")
            if tuple(message.fields) != self._requested:
                raise FlaStreamingError(f"Server acknowledged fields {message.fields}, requested {list(self._requested)}")
        except BaseException:
            await self.close()
            raise

        self._fields = tuple(message.fields)
        self._connection_timeout = message.connection_timeout
        self._last_seq = 0
        _logger.debug("Streaming session opened vehicle=%s fields=%s", self._vehicle_id, self._fields)

    async def close(self) -> None:
        ws, self._ws = self._ws, None
        if ws is not None and not ws.closed:
            await ws.close()
            _logger.debug("Streaming session closed vehicle=%s", self._vehicle_id)

    async def __aenter__(self) -> VehicleStream:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Receiving
    # ------------------------------------------------------------------

    def _require_ws(self) -> aiohttp.ClientWebSocketResponse:
        if self._ws is None:
            raise FlaStreamingClosedError("Streaming session is not open")
        return self._ws

    async def _receive(self, timeout: float | None = None) -> HelloMessage | StreamingFrame | ErrorMessage:
        ws = self._require_ws()
        msg = await ws.receive(timeout=timeout)
        if msg.type == aiohttp.WSMsgType.TEXT:
            return parse_server_message(msg.data)
        if msg.type in _CLOSED_TYPES:
            raise FlaStreamingClosedError("Streaming connection closed by server")
        if msg.type == aiohttp.WSMsgType.ERROR:
            raise FlaStreamingClosedError(f"Streaming connection failed: {ws.exception()}")
        raise FlaStreamingError(f"Unexpected websocket message type {msg.type!r}")

    async def next_update(self, timeout: float | None = None) -> StreamingUpdate:
        """Wait for the next frame and decode it.

        Raises :class:`FlaFrameLengthMismatchError` when the frame does not
        match the negotiated field list and :class:`FlaStreamingClosedError`
        when the server ends the session.  Both close the session.
        """
        try:
            message = await self._receive(timeout)
            if isinstance(message, ErrorMessage):
                raise FlaStreamingClosedError(message.value or message.error_type, error_type=message.error_type)
            if not isinstance(message, StreamingFrame):
                raise FlaStreamingError(f"Unexpected {message.msg_type} during session")
            update = decode_frame(message, self._fields, vehicle_id=self._vehicle_id)
            if update.seq <= self._last_seq:
                raise FlaStreamingError(f"Sequence went from {self._last_seq} to {update.seq}")
        except FlaStreamingError:
            await self.close()
            raise
        self._last_seq = update.seq
        return update

    def __aiter__(self) -> VehicleStream:
        return self

    async def __anext__(self) -> StreamingUpdate:
        if self._ws is None:
            raise StopAsyncIteration
        try:
            return await self.next_update()
        except FlaStreamingClosedError as exc:
            # A plain disconnect ends iteration; server-reported errors propagate.
            if exc.error_type:
                raise
            raise StopAsyncIteration from exc
