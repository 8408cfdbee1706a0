#!/usr/bin/env python3
"""Smoke client for a running railtrack server.

Connects to the WebSocket push channel, prints the initial snapshot,
posts a position fix (and optionally a signal advance and an emergency
stop), then prints every pushed message until the timeout elapses.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import aiohttp

_LOG = logging.getLogger("smoke_client")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Smoke test a railtrack server.")
    parser.add_argument("--url", default="http://localhost:8080", help="Server base URL.")
    parser.add_argument("--lat", type=float, default=11.03)
    parser.add_argument("--lng", type=float, default=76.98)
    parser.add_argument("--signal", metavar="TRACK:SIDE", help="Advance a signal, e.g. track-up:left.")
    parser.add_argument("--stop", metavar="ENTITY", help="Trigger an emergency stop for ENTITY.")
    parser.add_argument("--timeout", type=float, default=6.0, help="Seconds to keep listening.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    return parser.parse_args()


async def _post(session: aiohttp.ClientSession, url: str, body: dict[str, object]) -> None:
    async with session.post(url, json=body) as resp:
        text = await resp.text()
        print(f"[smoke] POST {url} -> {resp.status} {text}")


async def _listen(ws: aiohttp.ClientWebSocketResponse, timeout: float) -> None:
    try:
        async with asyncio.timeout(timeout):
            async for msg in ws:
                if msg.type != aiohttp.WSMsgType.TEXT:
                    continue
                print(f"[smoke] push {json.dumps(json.loads(msg.data), sort_keys=True)}")
    except TimeoutError:
        pass


async def _run(args: argparse.Namespace) -> int:
    base = args.url.rstrip("/")
    _LOG.debug("Connecting to %s/ws", base)
    async with aiohttp.ClientSession() as session, session.ws_connect(f"{base}/ws") as ws:
        listener = asyncio.create_task(_listen(ws, args.timeout))
        await asyncio.sleep(0.2)

        await _post(session, f"{base}/update-location", {"lat": args.lat, "lng": args.lng})
        if args.signal:
            track_id, _, side = args.signal.partition(":")
            await _post(session, f"{base}/update-signal", {"trackId": track_id, "side": side or "left"})
        if args.stop:
            await _post(session, f"{base}/emergency-stop", {"trainId": args.stop})

        await listener
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except aiohttp.ClientError as exc:
        print(f"[smoke] request failed: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(_main())
