"""Custom exception hierarchy for railtrack."""

from __future__ import annotations


class RailTrackError(Exception):
    """Base exception for all railtrack errors."""


class RailTrackConfigError(RailTrackError):
    """Invalid or missing configuration (including the waypoint catalog)."""


class InvalidInputError(RailTrackError):
    """A required field is missing or malformed.

    Raised synchronously by the command surface before any state is
    touched, so a rejected command never leaves a partial update behind.
    """

    def __init__(self, message: str, *, fields: tuple[str, ...] = ()) -> None:
        self.fields = fields
        super().__init__(message)


class NotFoundError(RailTrackError):
    """Reference to an unregistered track id or entity."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class TransportFailureError(RailTrackError):
    """An observer's channel is unreachable.

    Only ever handled inside the broadcast hub, which drops the observer.
    It never reaches the caller of the command that produced the event.
    """
