"""Signal models.

Each registered track carries a left and a right signal. Levels only move
one step at a time through the fixed cycle ``safe -> caution -> danger -> safe``.
"""

from __future__ import annotations

import enum

from railtrack.models._base import RailBaseModel


class SignalLevel(enum.StrEnum):
    """Aspect shown by a signal."""

    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"

    def next(self) -> SignalLevel:
        """The level one step further along the cycle, wrapping after ``danger``."""
        return _CYCLE[self]


_CYCLE: dict[SignalLevel, SignalLevel] = {
    SignalLevel.SAFE: SignalLevel.CAUTION,
    SignalLevel.CAUTION: SignalLevel.DANGER,
    SignalLevel.DANGER: SignalLevel.SAFE,
}


class SignalSide(enum.StrEnum):
    LEFT = "left"
    RIGHT = "right"


class SignalState(RailBaseModel):
    """Both signal sides of one track."""

    left: SignalLevel = SignalLevel.SAFE
    right: SignalLevel = SignalLevel.SAFE

    def level(self, side: SignalSide) -> SignalLevel:
        return self.left if side == SignalSide.LEFT else self.right

    def advanced(self, side: SignalSide) -> SignalState:
        """Copy of this state with *side* moved one step along the cycle."""
        return self.model_copy(update={side.value: self.level(side).next()})


class SignalUpdate(RailBaseModel):
    """Result of advancing one signal: the changed entry and the full table."""

    track_id: str
    side: SignalSide
    level: SignalLevel
    signals: dict[str, SignalState]
