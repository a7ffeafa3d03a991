"""Timer package."""

from .effects import CueKind, Effect, PlayCue, SettingsChanged, TriggerFanfare
from .engine import (
    IntervalScheduler,
    TimerSession,
    TimerSnapshot,
    TimerState,
    Phase,
    FANFARE_SECONDS,
)

__all__ = [
    "IntervalScheduler",
    "TimerSession",
    "TimerSnapshot",
    "TimerState",
    "Phase",
    "FANFARE_SECONDS",
    "CueKind",
    "Effect",
    "PlayCue",
    "SettingsChanged",
    "TriggerFanfare",
]
