"""Exception types raised by the interval timer."""

from __future__ import annotations


class IntervalTimerError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(IntervalTimerError, ValueError):
    """A configuration field is outside its allowed range."""

    def __init__(self, field: str, value: object, low: int, high: int) -> None:
        self.field = field
        self.value = value
        self.low = low
        self.high = high
        super().__init__(
            f"{field} must be an integer between {low} and {high}, got {value!r}"
        )


class InvalidCommandError(IntervalTimerError):
    """A command was issued in a state that cannot accept it."""


class PersistenceError(IntervalTimerError):
    """Settings could not be read from or written to disk."""


class PlaybackUnavailableError(IntervalTimerError):
    """A cue could not be played.  Never affects timing."""
