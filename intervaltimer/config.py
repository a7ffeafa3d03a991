"""Workout configuration with bounds validation.

A :class:`Configuration` is immutable and always valid: construction
checks every field, so an out-of-range value can never be stored.
Use :meth:`Configuration.replace` to derive an edited copy.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, fields
from typing import Any, Mapping

from .errors import ValidationError


# ── bounds (inclusive) ────────────────────────────────────────────────────

WORKOUT_BOUNDS = (2, 180)     # seconds
REST_BOUNDS = (2, 90)         # seconds
ROUNDS_BOUNDS = (1, 50)
LEAD_UP_BOUNDS = (0, 10)      # seconds; 0 skips the lead-up

FIELD_BOUNDS: dict[str, tuple[int, int]] = {
    "workout_duration": WORKOUT_BOUNDS,
    "rest_duration": REST_BOUNDS,
    "rounds": ROUNDS_BOUNDS,
    "lead_up_duration": LEAD_UP_BOUNDS,
}

# ── defaults ──────────────────────────────────────────────────────────────

DEFAULT_WORKOUT = 60
DEFAULT_REST = 45
DEFAULT_ROUNDS = 10
DEFAULT_LEAD_UP = 5


def check_field(name: str, value: Any) -> int:
    """Return *value* if it is a valid integer for field *name*.

    Raises :class:`ValidationError` otherwise.  ``bool`` is rejected
    even though it subclasses ``int``.
    """
    low, high = FIELD_BOUNDS[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(name, value, low, high)
    if not low <= value <= high:
        raise ValidationError(name, value, low, high)
    return value


@dataclass(frozen=True)
class Configuration:
    """The four user-tunable timer parameters."""

    workout_duration: int = DEFAULT_WORKOUT
    rest_duration: int = DEFAULT_REST
    rounds: int = DEFAULT_ROUNDS
    lead_up_duration: int = DEFAULT_LEAD_UP

    def __post_init__(self) -> None:
        for f in fields(self):
            check_field(f.name, getattr(self, f.name))

    def replace(self, **changes: int) -> "Configuration":
        """Validated copy with *changes* applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, int]:
        return dataclasses.asdict(self)

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any]
    ) -> tuple["Configuration", list[str]]:
        """Build a configuration from loosely-typed persisted data.

        Unknown keys are ignored.  Missing or invalid fields fall back to
        their defaults; the names of the invalid ones (not the missing
        ones) are returned alongside the configuration.
        """
        defaults = cls()
        values: dict[str, int] = {}
        rejected: list[str] = []
        for f in fields(cls):
            if f.name not in data:
                continue
            try:
                values[f.name] = check_field(f.name, data[f.name])
            except ValidationError:
                rejected.append(f.name)
        return dataclasses.replace(defaults, **values), rejected
