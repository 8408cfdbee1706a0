"""aiohttp web application exposing the command surface and push channel.

Routes keep the paths the dashboard and tracker firmware already use:

* ``POST /update-location``  ``{lat, lng}``
* ``POST /update-signal``    ``{trackId, side}`` or ``{trackId, left|right}``
* ``POST /emergency-stop``   ``{trainId}`` / ``{entity_id}``
* ``GET  /live``             current snapshot
* ``GET  /health``
* ``GET  /`` and ``/ws``     WebSocket push channel (``/`` also serves a banner)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp
from aiohttp import web

from railtrack.exceptions import InvalidInputError, NotFoundError, TransportFailureError
from railtrack.hub import Message, Sender
from railtrack.models.requests import (
    EmergencyStopRequest,
    PositionUpdateRequest,
    SignalUpdateRequest,
    validate_request,
)
from railtrack.service import RailTrackService
from railtrack.state.events import EventKind

_logger = logging.getLogger(__name__)

SERVICE_KEY: web.AppKey[RailTrackService] = web.AppKey("railtrack_service", RailTrackService)

BANNER = "Smart Rail-Tracking Backend is Running"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Map command-surface errors onto HTTP status codes."""
    try:
        return await handler(request)
    except InvalidInputError as exc:
        _logger.debug("Rejected %s %s: %s", request.method, request.path, exc)
        return _error(400, str(exc))
    except NotFoundError as exc:
        _logger.debug("Not found %s %s: %s", request.method, request.path, exc)
        return _error(404, str(exc))


async def _read_json(request: web.Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInputError(f"Request body is not valid JSON: {exc}") from exc


def _service(request: web.Request) -> RailTrackService:
    return request.app[SERVICE_KEY]


async def handle_update_location(request: web.Request) -> web.Response:
    body = validate_request(PositionUpdateRequest, await _read_json(request))
    update = _service(request).apply_position(body)
    data = {
        "type": EventKind.LOCATION_UPDATE.value,
        "lat": update.fix.lat,
        "lng": update.fix.lng,
        "nearest": update.nearest.to_wire(),
    }
    return web.json_response({"success": True, "data": data})


async def handle_update_signal(request: web.Request) -> web.Response:
    body = validate_request(SignalUpdateRequest, await _read_json(request))
    update = _service(request).apply_signal(body)
    payload = update.to_wire()
    return web.json_response({"success": True, **payload})


async def handle_emergency_stop(request: web.Request) -> web.Response:
    body = validate_request(EmergencyStopRequest, await _read_json(request))
    record = _service(request).apply_stop(body)
    return web.json_response(
        {"success": True, "message": "Emergency stop triggered", **record.to_wire()},
    )


async def handle_live(request: web.Request) -> web.Response:
    return web.json_response(_service(request).get_snapshot().to_wire())


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "observers": _service(request).hub.observer_count})


def _websocket_sender(ws: web.WebSocketResponse) -> Sender:
    async def send(message: Message) -> None:
        if ws.closed:
            raise TransportFailureError("WebSocket is closed")
        try:
            await ws.send_json(message)
        except (ConnectionError, aiohttp.ClientError, RuntimeError) as exc:
            raise TransportFailureError(f"WebSocket send failed: {exc}") from exc

    return send


async def handle_websocket(request: web.Request) -> web.WebSocketResponse:
    """Push channel: snapshot on connect, then every change event."""
    service = _service(request)
    ws = web.WebSocketResponse(heartbeat=30.0)
    await ws.prepare(request)

    observer = service.connect_observer(_websocket_sender(ws), name=f"ws-{request.remote}")
    try:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.ERROR:
                _logger.warning("WebSocket %s closed with exception %s", observer.name, ws.exception())
            # Observers only receive; inbound text is ignored.
    finally:
        service.disconnect_observer(observer)
    return ws


async def handle_index(request: web.Request) -> web.StreamResponse:
    probe = web.WebSocketResponse()
    if probe.can_prepare(request).ok:
        return await handle_websocket(request)
    return web.Response(text=BANNER)


async def _on_cleanup(app: web.Application) -> None:
    await app[SERVICE_KEY].close()


async def _on_startup(app: web.Application) -> None:
    await app[SERVICE_KEY].start()


def create_app(service: RailTrackService) -> web.Application:
    """Build the web application around *service*.

    The app starts and closes the service with its own lifecycle.
    """
    app = web.Application(middlewares=[error_middleware])
    app[SERVICE_KEY] = service

    app.router.add_get("/", handle_index)
    app.router.add_get("/ws", handle_websocket)
    app.router.add_get("/live", handle_live)
    app.router.add_get("/health", handle_health)
    app.router.add_post("/update-location", handle_update_location)
    app.router.add_post("/update-signal", handle_update_signal)
    app.router.add_post("/emergency-stop", handle_emergency_stop)

    app.on_startup.append(_on_startup)
    app.on_cleanup.append(_on_cleanup)
    return app


def run(service: RailTrackService) -> None:
    """Serve *service* until interrupted."""
    config = service.config
    _logger.info("Server running on %s:%d", config.host, config.port)
    web.run_app(create_app(service), host=config.host, port=config.port, print=None)
