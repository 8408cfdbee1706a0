"""Service configuration for railtrack."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from railtrack._constants import DEFAULT_TRACK_IDS
from railtrack.exceptions import RailTrackConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_number(env_key: str, value: str, cast: Callable[[str], Any]) -> Any:
    try:
        return cast(value)
    except ValueError as exc:
        raise RailTrackConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class RailTrackConfig:
    """Service configuration.

    Parameters
    ----------
    host : str
        Interface the HTTP/WebSocket server binds to.
    port : int
        TCP port of the HTTP/WebSocket server.
    track_ids : tuple of str
        Pre-registered track identifiers. Signals exist only for these.
    known_entities : tuple of str
        Entities that may be emergency-stopped. Empty means any
        non-empty entity id is accepted.
    waypoints_file : str or None
        JSON file holding the waypoint catalog. ``None`` uses the
        built-in catalog.
    stop_time_unit_seconds : float
        Length of one time unit of the emergency-stop sequence. The
        ``braking`` notification fires after 2 units and ``stopped``
        after 4.
    cancel_superseded_stop_timers : bool
        Cancel pending stop notifications when a new stop is triggered.
        Off by default, so rapid re-triggers produce overlapping sequences.
    observer_queue_size : int
        Outbound messages buffered per observer before new ones are
        dropped for that observer.
    mqtt_enabled : bool
        Subscribe to an MQTT topic carrying GPS position fixes.
    mqtt_host : str
        MQTT broker host.
    mqtt_port : int
        MQTT broker port.
    mqtt_topic : str
        Topic (wildcards allowed) carrying ``{"lat": .., "lng": ..}`` payloads.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_username : str or None
        Broker username.
    mqtt_password : str or None
        Broker password.
    mqtt_tls : bool
        Use TLS towards the broker.
    """

    host: str = "0.0.0.0"
    port: int = 8080
    track_ids: tuple[str, ...] = DEFAULT_TRACK_IDS
    known_entities: tuple[str, ...] = ()
    waypoints_file: str | None = None
    stop_time_unit_seconds: float = 1.0
    cancel_superseded_stop_timers: bool = False
    observer_queue_size: int = 64
    mqtt_enabled: bool = False
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_topic: str = "railtrack/position"
    mqtt_keepalive: int = 60
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_tls: bool = False

    def __post_init__(self) -> None:
        if not self.track_ids:
            raise RailTrackConfigError("At least one track id must be registered")
        if len(set(self.track_ids)) != len(self.track_ids):
            raise RailTrackConfigError(f"Duplicate track ids: {self.track_ids}")
        if self.stop_time_unit_seconds < 0:
            raise RailTrackConfigError("stop_time_unit_seconds must be >= 0")
        if self.observer_queue_size < 1:
            raise RailTrackConfigError("observer_queue_size must be >= 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> RailTrackConfig:
        """Create configuration from ``RAILTRACK_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        RailTrackConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "RAILTRACK_HOST": "host",
            "RAILTRACK_WAYPOINTS_FILE": "waypoints_file",
            "RAILTRACK_MQTT_HOST": "mqtt_host",
            "RAILTRACK_MQTT_TOPIC": "mqtt_topic",
            "RAILTRACK_MQTT_USERNAME": "mqtt_username",
            "RAILTRACK_MQTT_PASSWORD": "mqtt_password",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "RAILTRACK_PORT": ("port", int),
            "RAILTRACK_STOP_TIME_UNIT_SECONDS": ("stop_time_unit_seconds", float),
            "RAILTRACK_OBSERVER_QUEUE_SIZE": ("observer_queue_size", int),
            "RAILTRACK_MQTT_PORT": ("mqtt_port", int),
            "RAILTRACK_MQTT_KEEPALIVE": ("mqtt_keepalive", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        _ENV_LIST_MAP = {
            "RAILTRACK_TRACK_IDS": "track_ids",
            "RAILTRACK_KNOWN_ENTITIES": "known_entities",
        }
        for env_key, field_name in _ENV_LIST_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_list(val)

        if "cancel_superseded_stop_timers" not in overrides:
            config_kwargs["cancel_superseded_stop_timers"] = _env_bool(
                env.get("RAILTRACK_CANCEL_SUPERSEDED_STOP_TIMERS"),
                False,
            )
        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("RAILTRACK_MQTT_ENABLED"), False)
        if "mqtt_tls" not in overrides:
            config_kwargs["mqtt_tls"] = _env_bool(env.get("RAILTRACK_MQTT_TLS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
