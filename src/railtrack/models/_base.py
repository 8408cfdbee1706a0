"""Base model for railtrack state objects.

Every state model is immutable: components replace instances wholesale
instead of mutating fields, which keeps snapshots consistent.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class RailBaseModel(BaseModel):
    """Frozen model with a JSON-ready dump helper."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_wire(self) -> dict[str, Any]:
        """Dump to plain JSON-compatible types."""
        return self.model_dump(mode="json")
