"""aiohttp server exposing a :class:`VehicleSimulator` over the owner API wire contract.

REST (under ``/api/1``)::

    GET  /vehicles
    GET  /vehicles/{id}
    GET  /vehicles/{id}/vehicle_data[?endpoints=charge_state;drive_state;location_data]
    POST /vehicles/{id}/wake_up
    POST /vehicles/{id}/command/{name}

Streaming: websocket at ``/streaming/``; see :mod:`pyfla.models.streaming`.

Responses use the ``{response, error, error_description, messages}``
envelope.  Command rejections are ``200`` with ``result: false``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import WSCloseCode, WSMsgType, web

from pyfla._constants import API_PREFIX, LOCATION_DATA_ENDPOINT, STREAMING_PATH
from pyfla.config import SimulatorConfig
from pyfla.exceptions import FlaInvalidParameterError, FlaStreamingError
from pyfla.models._base import StateSection
from pyfla.models.command import CommandRequest, CommandResponse
from pyfla.models.streaming import (
    ErrorMessage,
    HelloMessage,
    StreamingErrorType,
    parse_subscribe_message,
)
from pyfla.simulator.registry import VehicleSimulator
from pyfla.streaming.codec import StreamingSession, encode_frame

_logger = logging.getLogger(__name__)


class StreamingHub:
    """Live streaming sockets and their worker tasks."""

    def __init__(self) -> None:
        self.sockets: set[web.WebSocketResponse] = set()
        self.tasks: set[asyncio.Task[Any]] = set()

    async def close(self) -> None:
        for ws in list(self.sockets):
            await ws.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
        tasks = list(self.tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self.tasks.clear()


SIMULATOR_KEY = web.AppKey("simulator", VehicleSimulator)
CONFIG_KEY = web.AppKey("simulator_config", SimulatorConfig)
HUB_KEY = web.AppKey("streaming_hub", StreamingHub)


# ------------------------------------------------------------------
# Envelope helpers
# ------------------------------------------------------------------


def _envelope(
    response: Any = None,
    *,
    error: str | None = None,
    error_description: str | None = None,
    status: int = 200,
) -> web.Response:
    body = {
        "response": response,
        "error": error,
        "error_description": error_description,
        "messages": None,
    }
    return web.json_response(body, status=status)


def _not_found() -> web.Response:
    return _envelope(error="not_found", error_description="Not Found", status=404)


def _bad_request(description: str) -> web.Response:
    return _envelope(error="invalid_command", error_description=description, status=400)


def _path_vehicle_id(request: web.Request) -> int | None:
    try:
        return int(request.match_info["vehicle_id"])
    except ValueError:
        return None


def _bearer_token(request: web.Request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


@web.middleware
async def _auth_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    config = request.app[CONFIG_KEY]
    # The streaming socket authenticates through its subscribe message.
    if config.require_token and request.path != STREAMING_PATH and not _bearer_token(request):
        return _envelope(error="unauthorized", error_description="Missing bearer token", status=401)
    return await handler(request)


# ------------------------------------------------------------------
# REST handlers
# ------------------------------------------------------------------


async def _list_vehicles(request: web.Request) -> web.Response:
    simulator = request.app[SIMULATOR_KEY]
    vehicles = await simulator.list_vehicles()
    return _envelope([vehicle.to_wire() for vehicle in vehicles])


async def _get_vehicle(request: web.Request) -> web.Response:
    simulator = request.app[SIMULATOR_KEY]
    vehicle_id = _path_vehicle_id(request)
    if vehicle_id is None or not simulator.is_known(vehicle_id):
        return _not_found()
    state = await simulator.snapshot(vehicle_id)
    return _envelope(state.definition().to_wire())


def _parse_endpoints(value: str) -> tuple[frozenset[StateSection], bool]:
    """Split ``charge_state;location_data`` into sections and the location flag."""
    sections: set[StateSection] = set()
    location = False
    for name in (part.strip() for part in value.split(";")):
        if not name:
            continue
        if name == LOCATION_DATA_ENDPOINT:
            location = True
            continue
        sections.add(StateSection(name))
    return frozenset(sections), location


async def _vehicle_data(request: web.Request) -> web.Response:
    simulator = request.app[SIMULATOR_KEY]
    vehicle_id = _path_vehicle_id(request)
    if vehicle_id is None or not simulator.is_known(vehicle_id):
        return _not_found()

    endpoints = request.query.get("endpoints")
    if endpoints is None:
        state = await simulator.snapshot(vehicle_id)
        return _envelope(state.to_wire())

    try:
        sections, location = _parse_endpoints(endpoints)
    except ValueError:
        _logger.debug("Invalid vehicle_data endpoints %r", endpoints)
        return _bad_request(f"Invalid endpoints: {endpoints}")

    state = await simulator.snapshot(vehicle_id)
    payload = state.restricted(sections)
    drive = payload.get(StateSection.DRIVE.value)
    if drive is not None and not location:
        drive["latitude"] = None
        drive["longitude"] = None
    return _envelope(payload)


async def _wake_up(request: web.Request) -> web.Response:
    simulator = request.app[SIMULATOR_KEY]
    vehicle_id = _path_vehicle_id(request)
    if vehicle_id is None or not simulator.is_known(vehicle_id):
        return _not_found()
    result = await simulator.command(vehicle_id, "wake_up")
    if result.state is None:
        return _envelope(error=result.reason, error_description=result.reason, status=500)
    return _envelope(result.state.definition().to_wire())


async def _command(request: web.Request) -> web.Response:
    simulator = request.app[SIMULATOR_KEY]
    vehicle_id = _path_vehicle_id(request)
    if vehicle_id is None:
        return _not_found()

    parameters: Any = {}
    if request.can_read_body:
        text = await request.text()
        if text.strip():
            try:
                parameters = json.loads(text)
            except json.JSONDecodeError:
                return _bad_request("Command body is not valid JSON")
    if not isinstance(parameters, dict):
        error = FlaInvalidParameterError(
            "Command body must be a JSON object",
            vehicle_id=vehicle_id,
            command=request.match_info["command"],
        )
        _logger.debug("Rejected command %s: %s", error.command, error)
        return _envelope(CommandResponse.failure(error).to_wire())

    request_model = CommandRequest(
        vehicle_id=vehicle_id,
        command=request.match_info["command"],
        parameters=parameters,
    )
    result = await simulator.execute(request_model)
    return _envelope(result.to_wire())


# ------------------------------------------------------------------
# Streaming
# ------------------------------------------------------------------


async def _reject(ws: web.WebSocketResponse, reason: str, *, tag: int | None = None) -> None:
    _logger.debug("Rejecting streaming session: %s", reason)
    message = ErrorMessage(tag=tag, error_type=StreamingErrorType.CLIENT_ERROR, value=reason)
    await ws.send_str(message.dump())


async def _negotiate(request: web.Request, ws: web.WebSocketResponse) -> StreamingSession | None:
    """Read the subscribe message and answer with ``control:hello``."""
    simulator = request.app[SIMULATOR_KEY]
    config = request.app[CONFIG_KEY]

    try:
        msg = await ws.receive(timeout=config.connection_timeout / 1000)
    except TimeoutError:
        await _reject(ws, "No subscribe message received")
        return None
    if msg.type != WSMsgType.TEXT:
        return None

    try:
        subscribe = parse_subscribe_message(msg.data)
    except FlaStreamingError as exc:
        await _reject(ws, str(exc))
        return None

    if config.require_token and not (subscribe.token or _bearer_token(request)):
        await _reject(ws, "Missing token", tag=subscribe.vehicle_id)
        return None
    if not simulator.is_known(subscribe.vehicle_id):
        await _reject(ws, f"Unknown vehicle {subscribe.vehicle_id}", tag=subscribe.vehicle_id)
        return None
    try:
        session = StreamingSession(vehicle_id=subscribe.vehicle_id, subscribed_fields=tuple(subscribe.fields))
    except FlaStreamingError as exc:
        await _reject(ws, str(exc), tag=subscribe.vehicle_id)
        return None

    hello = HelloMessage(fields=list(session.subscribed_fields), connection_timeout=config.connection_timeout)
    await ws.send_str(hello.dump())
    _logger.debug("Streaming session opened vehicle=%s fields=%s", session.vehicle_id, session.subscribed_fields)
    return session


def _offer(queue: asyncio.Queue[str], data: str, session: StreamingSession) -> None:
    """Enqueue *data*, dropping the oldest frame when the consumer lags."""
    if queue.full():
        queue.get_nowait()
        _logger.warning("Dropping frame for vehicle %s: streaming consumer too slow", session.vehicle_id)
    queue.put_nowait(data)


async def _produce(simulator: VehicleSimulator, session: StreamingSession, queue: asyncio.Queue[str]) -> None:
    while True:
        await simulator.wait_for_change(session.vehicle_id, session.last_revision)
        state, revision = await simulator.snapshot_with_revision(session.vehicle_id)
        session.last_revision = revision
        _offer(queue, encode_frame(state, session).dump(), session)


async def _send(ws: web.WebSocketResponse, queue: asyncio.Queue[str]) -> None:
    while True:
        data = await queue.get()
        await ws.send_str(data)


async def _drain(ws: web.WebSocketResponse) -> None:
    async for msg in ws:
        if msg.type == WSMsgType.TEXT:
            _logger.debug("Ignoring message on established streaming session")


async def _run_session(request: web.Request, ws: web.WebSocketResponse, session: StreamingSession) -> None:
    simulator = request.app[SIMULATOR_KEY]
    config = request.app[CONFIG_KEY]
    hub = request.app[HUB_KEY]

    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=config.stream_queue_size)
    tasks = [
        asyncio.create_task(_produce(simulator, session, queue)),
        asyncio.create_task(_send(ws, queue)),
        asyncio.create_task(_drain(ws)),
    ]
    hub.tasks.update(tasks)
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        hub.tasks.difference_update(tasks)

    for task in done:
        if not task.cancelled() and task.exception() is not None:
            _logger.debug("Streaming session for vehicle %s ended: %r", session.vehicle_id, task.exception())


async def _streaming(request: web.Request) -> web.WebSocketResponse:
    hub = request.app[HUB_KEY]
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    hub.sockets.add(ws)
    try:
        session = await _negotiate(request, ws)
        if session is not None:
            await _run_session(request, ws, session)
            _logger.debug("Streaming session closed vehicle=%s seq=%d", session.vehicle_id, session.seq)
    finally:
        hub.sockets.discard(ws)
        if not ws.closed:
            await ws.close()
    return ws


# ------------------------------------------------------------------
# Application
# ------------------------------------------------------------------


async def _on_startup(app: web.Application) -> None:
    app[SIMULATOR_KEY].start()


async def _on_shutdown(app: web.Application) -> None:
    await app[HUB_KEY].close()


async def _on_cleanup(app: web.Application) -> None:
    await app[SIMULATOR_KEY].close()


def create_app(
    simulator: VehicleSimulator | None = None,
    config: SimulatorConfig | None = None,
) -> web.Application:
    """Build the simulator web application.

    Streaming sessions are cancelled on shutdown, before the simulator's
    scheduler is stopped on cleanup.
    """
    if config is None:
        config = simulator.config if simulator is not None else SimulatorConfig()
    if simulator is None:
        simulator = VehicleSimulator(config)

    app = web.Application(middlewares=[_auth_middleware])
    app[SIMULATOR_KEY] = simulator
    app[CONFIG_KEY] = config
    app[HUB_KEY] = StreamingHub()

    app.router.add_get(f"{API_PREFIX}/vehicles", _list_vehicles)
    app.router.add_get(f"{API_PREFIX}/vehicles/{{vehicle_id}}", _get_vehicle)
    app.router.add_get(f"{API_PREFIX}/vehicles/{{vehicle_id}}/vehicle_data", _vehicle_data)
    app.router.add_post(f"{API_PREFIX}/vehicles/{{vehicle_id}}/wake_up", _wake_up)
    app.router.add_post(f"{API_PREFIX}/vehicles/{{vehicle_id}}/command/{{command}}", _command)
    app.router.add_get(STREAMING_PATH, _streaming)

    app.on_startup.append(_on_startup)
    app.on_shutdown.append(_on_shutdown)
    app.on_cleanup.append(_on_cleanup)
    return app
