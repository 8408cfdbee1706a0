"""Pydantic request models for command-surface entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
They are used internally by :class:`railtrack.service.RailTrackService`,
and accept the camelCase keys sent by the dashboard and
tracker firmware alongside snake_case.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from railtrack.exceptions import InvalidInputError
from railtrack.ingestion.normalize import safe_float, safe_str
from railtrack.models.signals import SignalSide


class _CommandRequest(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class PositionUpdateRequest(_CommandRequest):
    """A new position fix in decimal degrees."""

    lat: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("lng", "lon", "longitude"))

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError("must be a number")
        return parsed


def _names_side(value: Any) -> bool:
    """Whether a ``left``/``right`` value counts as present (falsy values do not)."""
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, bool | int | float):
        return bool(value) and not (isinstance(value, float) and math.isnan(value))
    return value is not None


class SignalUpdateRequest(_CommandRequest):
    """Which side of which track to advance.

    The side is named either directly (``side``) or, as the
    dashboard does, by supplying a ``left`` or ``right`` key. Falsy values
    (``false``, ``0``, ``""``, ``null``) leave that side unnamed; any other
    value only names the side, since the command never sets a target level.
    """

    track_id: str = Field(validation_alias=AliasChoices("track_id", "trackId"))
    side: SignalSide | None = None
    left: Any = None
    right: Any = None

    @field_validator("track_id")
    @classmethod
    def _track_id_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("track_id must be non-empty")
        return value

    @model_validator(mode="after")
    def _resolve_side(self) -> SignalUpdateRequest:
        named: set[SignalSide] = set()
        if self.side is not None:
            named.add(self.side)
        if _names_side(self.left):
            named.add(SignalSide.LEFT)
        if _names_side(self.right):
            named.add(SignalSide.RIGHT)

        if not named:
            raise ValueError("one of side, left or right is required")
        if len(named) > 1:
            raise ValueError("exactly one signal side may be advanced per request")
        object.__setattr__(self, "side", named.pop())
        return self

    @property
    def resolved_side(self) -> SignalSide:
        assert self.side is not None  # noqa: S101
        return self.side


class EmergencyStopRequest(_CommandRequest):
    """Entity to bring to an emergency stop."""

    entity_id: str = Field(validation_alias=AliasChoices("entity_id", "entityId", "trainId", "train_id"))

    @field_validator("entity_id", mode="before")
    @classmethod
    def _entity_id_text(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("entity_id must be non-empty")
        return text


TRequest = TypeVar("TRequest", bound=BaseModel)


def validate_request(model: type[TRequest], data: Any) -> TRequest:
    """Validate *data* against *model*, translating failures to :class:`InvalidInputError`."""
    if not isinstance(data, Mapping):
        raise InvalidInputError(f"{model.__name__} body must be a JSON object")
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        errors = exc.errors(include_url=False)
        fields = tuple(".".join(str(part) for part in err["loc"]) for err in errors)
        details = "; ".join(f"{loc or 'body'}: {err['msg']}" for loc, err in zip(fields, errors, strict=True))
        raise InvalidInputError(f"Invalid {model.__name__}: {details}", fields=fields) from exc
