"""Change events produced by state mutations.

Events are the only thing that leaves the state layer; the broadcast hub
renders them into push messages.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventKind(StrEnum):
    LOCATION_UPDATE = "LOCATION_UPDATE"
    SIGNAL_UPDATE = "SIGNAL_UPDATE"
    EMERGENCY_STOP = "EMERGENCY_STOP"


class ChangeEvent(BaseModel):
    """A state change to fan out to observers.

    ``sequence`` is assigned by the store and is strictly increasing, so
    it reflects the global production order.
    """

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    sequence: int = Field(default=0, ge=0)
    produced_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    data: dict[str, Any] = Field(default_factory=dict, description="JSON-ready event body")

    def to_message(self) -> dict[str, Any]:
        """Labelled push message: ``{"type": kind, "seq": n, **data}``."""
        return {"type": self.kind.value, "seq": self.sequence, **self.data}
