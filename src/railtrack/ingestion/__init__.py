"""Ingestion layer.

Adapters that receive position fixes from outside the HTTP surface (the
MQTT GPS feed) and normalize them into command-surface inputs.
"""

__all__: list[str] = []
