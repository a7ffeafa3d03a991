"""Effects emitted by the scheduler for the host to execute."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..config import Configuration


class CueKind(Enum):
    WORK_START = "work_start"
    WORK_END = "work_end"
    REST_END = "rest_end"
    COMPLETE = "complete"


@dataclass(frozen=True)
class PlayCue:
    kind: CueKind


@dataclass(frozen=True)
class TriggerFanfare:
    pass


@dataclass(frozen=True)
class SettingsChanged:
    config: Configuration


Effect = Union[PlayCue, TriggerFanfare, SettingsChanged]
