"""Emergency-stop models."""

from __future__ import annotations

import enum
from datetime import datetime

from railtrack.models._base import RailBaseModel


class StopPhase(enum.StrEnum):
    """Stage of an emergency-stop sequence, as announced to observers."""

    INITIATED = "initiated"
    BRAKING = "braking"
    STOPPED = "stopped"


class StopRecord(RailBaseModel):
    """The single active emergency stop."""

    entity_id: str
    issued_at: datetime
