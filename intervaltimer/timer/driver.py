"""Qt host loop for the interval scheduler.

The driver owns the scheduler exclusively.  A ``QTimer`` polls it at
10 Hz; user commands are stamped with the driver's clock and forwarded.
Effects returned by the scheduler are executed here, after the
scheduler call has returned, and never feed back into it.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..config import Configuration
from ..errors import (
    InvalidCommandError,
    PersistenceError,
    PlaybackUnavailableError,
)
from ..settings import SettingsStore
from .effects import CueKind, Effect, PlayCue, SettingsChanged, TriggerFanfare
from .engine import IntervalScheduler, TimerSnapshot, TimerState

if TYPE_CHECKING:
    from ..audio.sounds import SoundManager

logger = logging.getLogger(__name__)


TICK_INTERVAL_MS = 100

# Effect kind → cue asset name understood by SoundManager.
CUE_SOUNDS: dict[CueKind, str] = {
    CueKind.WORK_START: "work_start",
    CueKind.WORK_END: "work_end",
    CueKind.REST_END: "rest_end",
    CueKind.COMPLETE: "complete",
}
FANFARE_SOUND = "fanfare"


class TimerDriver(QObject):
    """Drives an :class:`IntervalScheduler` from the Qt event loop.

    Signals
    -------
    ticked(snapshot: TimerSnapshot)
        Emitted after every poll and every command.
    state_changed(new_state: TimerState)
        Emitted when the scheduler's state differs from the last one seen.
    fanfare()
        Emitted when a cycle completes and the fanfare is armed.
    cycle_completed()
        Emitted once the fanfare window of a completed cycle has elapsed.
    effect_emitted(effect: Effect)
        Every effect, after the driver has executed it.
    """

    ticked = pyqtSignal(object)
    state_changed = pyqtSignal(object)
    fanfare = pyqtSignal()
    cycle_completed = pyqtSignal()
    effect_emitted = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        store: SettingsStore | None = None,
        sound_manager: SoundManager | None = None,
        clock: Callable[[], float] = time.monotonic,
        cue_lead_up_end: bool = False,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._sounds = sound_manager
        self._clock = clock

        config = store.load() if store is not None else Configuration()
        self._scheduler = IntervalScheduler(
            config, cue_lead_up_end=cue_lead_up_end,
        )
        self._last_state: TimerState = TimerState.IDLE
        self._awaiting_fanfare_end = False

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def scheduler(self) -> IntervalScheduler:
        return self._scheduler

    @property
    def config(self) -> Configuration:
        return self._scheduler.config

    @property
    def state(self) -> TimerState:
        return self._scheduler.state

    @property
    def is_polling(self) -> bool:
        return self._qt_timer.isActive()

    def snapshot(self) -> TimerSnapshot:
        return self._scheduler.snapshot(self._clock())

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        effects = self._scheduler.start(self._clock())
        if not self._scheduler.is_idle:
            # a new cycle supersedes the previous one's pending completion
            self._awaiting_fanfare_end = False
            self._qt_timer.start()
        self._run(effects)

    def pause(self) -> None:
        self._run(self._scheduler.pause(self._clock()))

    def resume(self) -> None:
        try:
            effects = self._scheduler.resume(self._clock())
        except InvalidCommandError as exc:
            logger.warning("%s", exc)
            return
        self._run(effects)

    def stop(self) -> None:
        if not self._scheduler.is_idle:
            self._awaiting_fanfare_end = False
        self._run(self._scheduler.stop())

    def configure(self, config: Configuration | None = None, **changes: int) -> None:
        """Apply a new configuration.  ValidationError propagates."""
        self._run(self._scheduler.configure(config, **changes))

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        self._run(self._scheduler.tick(self._clock()))

    def _run(self, effects: list[Effect]) -> None:
        for effect in effects:
            self._execute(effect)
            self.effect_emitted.emit(effect)

        now = self._clock()
        snap = self._scheduler.snapshot(now)
        if snap.state != self._last_state:
            self._last_state = snap.state
            self.state_changed.emit(snap.state)
        self.ticked.emit(snap)

        if self._awaiting_fanfare_end and not snap.fanfare_active:
            self._awaiting_fanfare_end = False
            self.cycle_completed.emit()

        if self._scheduler.is_idle and not snap.fanfare_active:
            self._qt_timer.stop()

    def _execute(self, effect: Effect) -> None:
        if isinstance(effect, PlayCue):
            self._play(CUE_SOUNDS[effect.kind])
        elif isinstance(effect, TriggerFanfare):
            self._awaiting_fanfare_end = True
            self._play(FANFARE_SOUND)
            self.fanfare.emit()
        elif isinstance(effect, SettingsChanged):
            if self._store is None:
                return
            try:
                self._store.save(effect.config)
            except PersistenceError as exc:
                logger.warning("Settings not saved: %s", exc)

    def _play(self, name: str) -> None:
        if self._sounds is None:
            return
        try:
            self._sounds.play(name)
        except PlaybackUnavailableError as exc:
            logger.warning("Cue dropped: %s", exc)
