"""Command-line entrypoint: ``railtrack serve``."""

from __future__ import annotations

import argparse
import logging
import sys

from railtrack import __version__
from railtrack.config import RailTrackConfig
from railtrack.exceptions import RailTrackConfigError
from railtrack.server import run
from railtrack.service import RailTrackService


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="railtrack",
        description="Live rail position, signal and emergency-stop engine with WebSocket push.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP/WebSocket server.")
    serve.add_argument("--host", default=None, help="Bind address (default: RAILTRACK_HOST or 0.0.0.0).")
    serve.add_argument("--port", type=int, default=None, help="TCP port (default: RAILTRACK_PORT or 8080).")
    serve.add_argument("--waypoints", default=None, help="JSON file with the waypoint catalog.")
    serve.add_argument(
        "--cancel-superseded-stop-timers",
        action="store_true",
        default=None,
        help="Cancel pending stop notifications when a new stop is triggered.",
    )
    serve.add_argument("--mqtt", action="store_true", default=None, help="Enable the MQTT GPS feed.")
    serve.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {
        "host": args.host,
        "port": args.port,
        "waypoints_file": args.waypoints,
        "cancel_superseded_stop_timers": args.cancel_superseded_stop_timers,
        "mqtt_enabled": args.mqtt,
    }
    try:
        config = RailTrackConfig.from_env(**{k: v for k, v in overrides.items() if v is not None})
        service = RailTrackService(config)
    except RailTrackConfigError as exc:
        print(f"railtrack: configuration error: {exc}", file=sys.stderr)
        return 2

    run(service)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
