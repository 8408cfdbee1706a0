"""Waypoint model."""

from __future__ import annotations

from pydantic import Field, field_validator

from railtrack.models._base import RailBaseModel


class Waypoint(RailBaseModel):
    """A fixed, named reference coordinate.

    Parameters
    ----------
    id : str
        Unique catalog identifier.
    name : str
        Display name.
    code : str or None
        Short station code, if the waypoint has one.
    lat : float
        Latitude in degrees.
    lng : float
        Longitude in degrees.
    """

    id: str
    name: str
    code: str | None = None
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)

    @field_validator("id", "name")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must be non-empty")
        return text
