"""Interval timer state machine.

States
------
IDLE             No cycle in progress.
LEAD_UP          Count-in before the first workout phase.
WORKOUT          Workout phase counting down.
REST             Rest phase counting down.
PAUSED_*         A running phase frozen by ``pause``.  Internally this is a
                 single paused concept: the session keeps its phase and a
                 ``paused_remaining`` value instead of a start timestamp.

Transitions
-----------
IDLE → LEAD_UP | WORKOUT             (start; WORKOUT when lead-up is 0)
LEAD_UP → WORKOUT                    (tick, lead-up elapsed; silent)
WORKOUT → REST                       (tick, workout elapsed; WORK_END cue)
REST → WORKOUT                       (tick, rest elapsed, rounds left;
                                      REST_END cue)
REST → IDLE                          (tick, rest elapsed, final round;
                                      COMPLETE cue + fanfare)
{running} → PAUSED_*                 (pause)
PAUSED_* → {running}                 (resume)
Any → IDLE                           (stop)

The scheduler is pure: no clock reads, no I/O.  Every operation takes the
current timestamp (seconds, any monotonic origin) from the caller and
returns a list of effects for the caller to execute.

Elapsed time is always recomputed as ``now - phase_started_at``, never
accumulated per tick, so irregular or skipped ticks cannot drift the timer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..config import Configuration
from ..errors import InvalidCommandError
from .effects import (
    CueKind,
    Effect,
    PlayCue,
    SettingsChanged,
    TriggerFanfare,
)

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    LEAD_UP = "lead_up"
    WORKOUT = "workout"
    REST = "rest"


class TimerState(Enum):
    IDLE = "idle"
    LEAD_UP = "lead_up"
    WORKOUT = "workout"
    REST = "rest"
    PAUSED_LEAD_UP = "paused_lead_up"
    PAUSED_WORKOUT = "paused_workout"
    PAUSED_REST = "paused_rest"


# ── constants ─────────────────────────────────────────────────────────────

FANFARE_SECONDS = 2.0

_RUNNING_STATE: dict[Phase, TimerState] = {
    Phase.LEAD_UP: TimerState.LEAD_UP,
    Phase.WORKOUT: TimerState.WORKOUT,
    Phase.REST: TimerState.REST,
}

_PAUSED_STATE: dict[Phase, TimerState] = {
    Phase.LEAD_UP: TimerState.PAUSED_LEAD_UP,
    Phase.WORKOUT: TimerState.PAUSED_WORKOUT,
    Phase.REST: TimerState.PAUSED_REST,
}


# ── session / snapshot ────────────────────────────────────────────────────


@dataclass
class TimerSession:
    """The live run.  Exists only while the scheduler is not IDLE.

    Exactly one of ``phase_started_at`` (running) and ``paused_remaining``
    (paused) is set.  ``phase_duration`` is captured when the phase is
    entered, so configuration edits only affect later phases.
    """

    phase: Phase
    phase_duration: int
    current_round: int = 0  # 0-indexed
    phase_started_at: float | None = None
    paused_remaining: float | None = None

    @property
    def is_paused(self) -> bool:
        return self.paused_remaining is not None

    @property
    def state(self) -> TimerState:
        if self.is_paused:
            return _PAUSED_STATE[self.phase]
        return _RUNNING_STATE[self.phase]

    def elapsed(self, now: float) -> float:
        if self.paused_remaining is not None:
            return self.phase_duration - self.paused_remaining
        if self.phase_started_at is None:
            return 0.0
        return now - self.phase_started_at

    def remaining(self, now: float) -> float:
        """Seconds left in the phase, always within [0, phase_duration]."""
        if self.paused_remaining is not None:
            return self.paused_remaining
        left = self.phase_duration - self.elapsed(now)
        return max(0.0, min(float(self.phase_duration), left))


@dataclass(frozen=True)
class TimerSnapshot:
    """Read-only view of the scheduler for presentation."""

    state: TimerState
    phase: Phase | None
    current_round: int
    rounds: int
    remaining: float
    phase_duration: int
    progress_fraction: float
    fanfare_active: bool

    @property
    def remaining_seconds(self) -> int:
        """Remaining time truncated to whole seconds."""
        return int(self.remaining)

    @property
    def display_round(self) -> int:
        """1-based round number for display."""
        return self.current_round + 1

    @property
    def is_running(self) -> bool:
        return self.state in _RUNNING_STATE.values()

    @property
    def is_paused(self) -> bool:
        return self.state in _PAUSED_STATE.values()


# ── scheduler ─────────────────────────────────────────────────────────────


class IntervalScheduler:
    """Pollable workout/rest interval state machine.

    The host calls :meth:`tick` at a fixed cadence (10 Hz in the bundled
    driver) and forwards user commands.  Every call returns the effects
    the host should execute: cue playback, the completion fanfare and
    settings persistence.
    """

    def __init__(
        self,
        config: Configuration | None = None,
        *,
        cue_lead_up_end: bool = False,
        fanfare_seconds: float = FANFARE_SECONDS,
    ) -> None:
        self._config: Configuration = config or Configuration()
        self._cue_lead_up_end = cue_lead_up_end
        self._fanfare_seconds = fanfare_seconds
        self._session: TimerSession | None = None
        self._fanfare_armed_at: float | None = None

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def session(self) -> TimerSession | None:
        return self._session

    @property
    def state(self) -> TimerState:
        if self._session is None:
            return TimerState.IDLE
        return self._session.state

    @property
    def phase(self) -> Phase | None:
        return self._session.phase if self._session else None

    @property
    def current_round(self) -> int:
        """0-indexed round in progress (0 when IDLE)."""
        return self._session.current_round if self._session else 0

    @property
    def is_idle(self) -> bool:
        return self._session is None

    @property
    def is_running(self) -> bool:
        return self._session is not None and not self._session.is_paused

    @property
    def is_paused(self) -> bool:
        return self._session is not None and self._session.is_paused

    @property
    def fanfare_armed_at(self) -> float | None:
        return self._fanfare_armed_at

    def fanfare_active(self, now: float) -> bool:
        armed = self._fanfare_armed_at
        return armed is not None and now - armed < self._fanfare_seconds

    def remaining(self, now: float) -> float:
        if self._session is None:
            return 0.0
        return self._session.remaining(now)

    def progress(self, now: float) -> float:
        """0.0 → 1.0 through the current phase; 0.0 when IDLE."""
        session = self._session
        if session is None or session.phase_duration <= 0:
            return 0.0
        fraction = 1.0 - session.remaining(now) / session.phase_duration
        return max(0.0, min(1.0, fraction))

    def snapshot(self, now: float) -> TimerSnapshot:
        session = self._session
        rounds = self._config.rounds
        if session is not None:
            # A mid-cycle rounds reduction ends the cycle after the current
            # round; never report fewer rounds than the one in progress.
            rounds = max(rounds, session.current_round + 1)
        return TimerSnapshot(
            state=self.state,
            phase=self.phase,
            current_round=self.current_round,
            rounds=rounds,
            remaining=self.remaining(now),
            phase_duration=session.phase_duration if session else 0,
            progress_fraction=self.progress(now),
            fanfare_active=self.fanfare_active(now),
        )

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def configure(
        self, config: Configuration | None = None, **changes: int
    ) -> list[Effect]:
        """Replace the configuration, or apply field *changes* to it.

        Raises :class:`~intervaltimer.errors.ValidationError` when a value
        is out of bounds; the previous configuration is kept in that case.
        A phase already in progress keeps its captured duration.
        """
        new_config = (config or self._config).replace(**changes)
        self._config = new_config
        logger.debug("Configuration updated: %s", new_config)
        return [SettingsChanged(new_config)]

    def start(self, now: float) -> list[Effect]:
        """Begin a cycle.  Ignored unless IDLE."""
        if self._session is not None:
            logger.debug("start ignored in state %s", self.state.value)
            return []
        if self._config.lead_up_duration > 0:
            phase = Phase.LEAD_UP
        else:
            phase = Phase.WORKOUT
        self._session = TimerSession(
            phase=phase,
            phase_duration=self._duration_for(phase),
            current_round=0,
            phase_started_at=now,
        )
        logger.debug("Cycle started in %s", phase.value)
        return []

    def pause(self, now: float) -> list[Effect]:
        """Freeze the running phase.  Ignored when IDLE or already paused."""
        session = self._session
        if session is None or session.is_paused:
            return []
        session.paused_remaining = session.remaining(now)
        session.phase_started_at = None
        logger.debug(
            "Paused %s with %.2fs left",
            session.phase.value, session.paused_remaining,
        )
        return []

    def resume(self, now: float) -> list[Effect]:
        """Continue a paused phase with exactly the time it had left.

        Ignored when IDLE; raises :class:`InvalidCommandError` when the
        timer is running.
        """
        session = self._session
        if session is None:
            return []
        if session.paused_remaining is None:
            raise InvalidCommandError(
                f"cannot resume: timer is {session.state.value}, not paused"
            )
        already_elapsed = session.phase_duration - session.paused_remaining
        session.phase_started_at = now - already_elapsed
        session.paused_remaining = None
        logger.debug("Resumed %s", session.phase.value)
        return []

    def stop(self) -> list[Effect]:
        """Abandon the cycle and return to IDLE.  No cue."""
        if self._session is not None:
            logger.debug("Stopped in state %s", self.state.value)
        self._session = None
        return []

    def tick(self, now: float) -> list[Effect]:
        """Advance time.  Performs at most one phase transition."""
        effects: list[Effect] = []

        if (
            self._fanfare_armed_at is not None
            and not self.fanfare_active(now)
        ):
            self._fanfare_armed_at = None

        session = self._session
        if session is None or session.is_paused:
            return effects
        if session.elapsed(now) < session.phase_duration:
            return effects

        effects.extend(self._finish_phase(session, now))
        return effects

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _duration_for(self, phase: Phase) -> int:
        if phase is Phase.LEAD_UP:
            return self._config.lead_up_duration
        if phase is Phase.WORKOUT:
            return self._config.workout_duration
        return self._config.rest_duration

    def _enter(self, session: TimerSession, phase: Phase, now: float) -> None:
        session.phase = phase
        session.phase_duration = self._duration_for(phase)
        session.phase_started_at = now
        session.paused_remaining = None
        logger.debug(
            "Entered %s (round %d/%d)",
            phase.value, session.current_round + 1, self._config.rounds,
        )

    def _finish_phase(self, session: TimerSession, now: float) -> list[Effect]:
        if session.phase is Phase.LEAD_UP:
            self._enter(session, Phase.WORKOUT, now)
            if self._cue_lead_up_end:
                return [PlayCue(CueKind.WORK_START)]
            return []

        if session.phase is Phase.WORKOUT:
            self._enter(session, Phase.REST, now)
            return [PlayCue(CueKind.WORK_END)]

        if session.current_round + 1 < self._config.rounds:
            session.current_round += 1
            self._enter(session, Phase.WORKOUT, now)
            return [PlayCue(CueKind.REST_END)]

        # final rest done
        logger.debug("Cycle complete after %d rounds", session.current_round + 1)
        self._session = None
        self._fanfare_armed_at = now
        return [PlayCue(CueKind.COMPLETE), TriggerFanfare()]
