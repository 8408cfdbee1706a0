"""Normalization helpers.

Centralizes defensive parsing of loosely typed inbound values.
"""

from __future__ import annotations

import json
import math
from typing import Any


def safe_float(value: Any) -> float | None:
    """Parse *value* as a float, ``None`` unless it is a finite number.

    Booleans are rejected even though ``float(True)`` would succeed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def parse_json_object(payload: bytes | str) -> dict[str, Any] | None:
    """Decode a JSON object payload, ``None`` when it is not one."""
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            return None
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None
