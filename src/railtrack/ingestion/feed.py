"""GPS feed ingestion helpers.

Trackers publish small JSON documents; this module turns one raw feed
message into the ``(lat, lng)`` pair the command surface expects.
"""

from __future__ import annotations

from typing import Any

from railtrack.ingestion.normalize import parse_json_object

_NESTED_KEYS = ("data", "coordinates", "position")


def parse_position_payload(payload: bytes | str) -> dict[str, Any] | None:
    """Extract a position dict from a raw feed message.

    Accepts a flat ``{"lat": .., "lng": ..}`` object or one where the
    coordinates are nested under ``data``, ``coordinates`` or ``position``.
    Values are passed through untouched; validation happens at the command
    surface. Returns ``None`` when the message is not a JSON object.
    """
    parsed = parse_json_object(payload)
    if parsed is None:
        return None
    for key in _NESTED_KEYS:
        nested = parsed.get(key)
        if isinstance(nested, dict):
            merged = dict(parsed)
            merged.pop(key)
            merged.update(nested)
            return merged
    return parsed
