"""Internal MQTT runtime for the GPS position feed."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from railtrack.config import RailTrackConfig
from railtrack.ingestion.feed import parse_position_payload


@dataclass(frozen=True)
class FeedMessage:
    """A decoded position message received from the feed."""

    topic: str
    payload: dict[str, Any]


class PositionFeedRuntime:
    """Threaded paho-mqtt runtime that hands decoded feed messages to an asyncio loop.

    The paho network thread never touches service state: every message is
    forwarded with ``loop.call_soon_threadsafe``.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        config: RailTrackConfig,
        on_message: Callable[[FeedMessage], None],
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._config = config
        self._on_message = on_message
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    def _handle_payload(self, topic: str, payload: bytes) -> None:
        parsed = parse_position_payload(payload)
        if parsed is None:
            self._logger.warning("Ignoring non-JSON feed payload topic=%s bytes=%d", topic, len(payload))
            return
        self._logger.debug("Feed message topic=%s payload=%s", topic, parsed)
        self._loop.call_soon_threadsafe(self._on_message, FeedMessage(topic=topic, payload=parsed))

    def start(self) -> None:
        """Connect to the broker and subscribe to the configured topic."""
        self.stop()
        config = self._config
        self._logger.debug(
            "MQTT feed start requested host=%s port=%s topic=%s",
            config.mqtt_host,
            config.mqtt_port,
            config.mqtt_topic,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._logger)
        if config.mqtt_username:
            client.username_pw_set(config.mqtt_username, config.mqtt_password)
        if config.mqtt_tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.info("MQTT feed connected, subscribing topic=%s", config.mqtt_topic)
            c.subscribe(config.mqtt_topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            self._handle_payload(msg.topic, msg.payload)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.warning("MQTT feed disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        client.connect(config.mqtt_host, config.mqtt_port, keepalive=config.mqtt_keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect the current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
