"""Tests for the Qt host loop that drives the scheduler.

Ticks are triggered by calling ``_on_tick`` directly against a fake clock,
so no event loop needs to run.
"""

import json
import logging

import pytest

from intervaltimer.config import Configuration
from intervaltimer.errors import PlaybackUnavailableError, ValidationError
from intervaltimer.settings import SettingsStore
from intervaltimer.timer.driver import TimerDriver, CUE_SOUNDS, FANFARE_SOUND
from intervaltimer.timer.effects import CueKind, PlayCue, SettingsChanged, TriggerFanfare
from intervaltimer.timer.engine import TimerState

from helpers import SignalCollector


class RecordingSounds:
    def __init__(self):
        self.played: list[str] = []

    def play(self, name: str) -> None:
        self.played.append(name)


class BrokenSounds:
    def __init__(self):
        self.attempts = 0

    def play(self, name: str) -> None:
        self.attempts += 1
        raise PlaybackUnavailableError(f"cue {name!r} is not loaded")


def advance(driver, clock, seconds, step=0.1):
    for _ in range(int(round(seconds / step))):
        clock.advance(step)
        driver._on_tick()


# ═══════════════════════════════════════════════════════════════════════════
#  STARTUP / CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


class TestStartup:

    def test_loads_config_from_store(self, driver, config):
        assert driver.config == config
        assert driver.state == TimerState.IDLE
        assert not driver.is_polling

    def test_without_store_uses_defaults(self, qapp, clock):
        d = TimerDriver(clock=clock)
        assert d.config == Configuration()

    def test_first_run_persists_defaults(self, qapp, tmp_path, clock):
        path = tmp_path / "fresh.json"
        TimerDriver(store=SettingsStore(path), clock=clock)
        assert json.loads(path.read_text(encoding="utf-8"))["rounds"] == 10


class TestConfigure:

    def test_configure_saves_settings(self, driver, settings_path):
        driver.configure(rounds=7)
        assert driver.config.rounds == 7
        stored = json.loads(settings_path.read_text(encoding="utf-8"))
        assert stored["rounds"] == 7

    def test_configure_emits_effect(self, driver):
        c = SignalCollector()
        driver.effect_emitted.connect(c)
        driver.configure(rest_duration=30)
        assert c.last == SettingsChanged(driver.config)

    def test_invalid_configure_propagates_and_keeps_file(
        self, driver, settings_path, config,
    ):
        before = settings_path.read_text(encoding="utf-8")
        with pytest.raises(ValidationError):
            driver.configure(workout_duration=1)
        assert driver.config == config
        assert settings_path.read_text(encoding="utf-8") == before

    def test_save_failure_is_logged_not_raised(self, qapp, tmp_path, clock, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        d = TimerDriver(store=SettingsStore(blocker / "s.json"), clock=clock)
        with caplog.at_level(logging.WARNING, logger="intervaltimer.timer.driver"):
            d.configure(rounds=4)
        assert d.config.rounds == 4
        assert "Settings not saved" in caplog.text


# ═══════════════════════════════════════════════════════════════════════════
#  CONTROLS
# ═══════════════════════════════════════════════════════════════════════════


class TestControls:

    def test_start_begins_polling(self, driver):
        c = SignalCollector()
        driver.state_changed.connect(c)
        driver.start()
        assert driver.state == TimerState.WORKOUT
        assert driver.is_polling
        assert c.last == TimerState.WORKOUT

    def test_ticked_emits_snapshot(self, driver, clock):
        c = SignalCollector()
        driver.ticked.connect(c)
        driver.start()
        clock.advance(1.5)
        driver._on_tick()
        assert c.last.remaining == pytest.approx(3.5)
        assert c.last.remaining_seconds == 3

    def test_pause_resume_keeps_remaining(self, driver, clock):
        driver.start()
        clock.advance(2)
        driver.pause()
        assert driver.state == TimerState.PAUSED_WORKOUT
        clock.advance(300)
        driver._on_tick()
        driver.resume()
        assert driver.state == TimerState.WORKOUT
        assert driver.snapshot().remaining == pytest.approx(3.0)

    def test_resume_while_running_is_logged(self, driver, caplog):
        driver.start()
        with caplog.at_level(logging.WARNING, logger="intervaltimer.timer.driver"):
            driver.resume()
        assert driver.state == TimerState.WORKOUT
        assert "cannot resume" in caplog.text

    def test_stop_returns_to_idle_and_stops_polling(self, driver, clock):
        c = SignalCollector()
        driver.state_changed.connect(c)
        driver.start()
        clock.advance(1)
        driver.stop()
        assert driver.state == TimerState.IDLE
        assert not driver.is_polling
        assert c.items == [TimerState.WORKOUT, TimerState.IDLE]


# ═══════════════════════════════════════════════════════════════════════════
#  EFFECT EXECUTION
# ═══════════════════════════════════════════════════════════════════════════


class TestEffects:

    def _driver(self, store, clock, sounds):
        return TimerDriver(store=store, clock=clock, sound_manager=sounds)

    def test_full_cycle_plays_cues_in_order(self, qapp, driver, store, clock):
        sounds = RecordingSounds()
        d = self._driver(store, clock, sounds)
        d.start()
        advance(d, clock, 40)
        assert sounds.played == [
            "work_end", "rest_end",
            "work_end", "rest_end",
            "work_end", "complete", FANFARE_SOUND,
        ]

    def test_fanfare_then_cycle_completed(self, qapp, driver, store, clock):
        d = self._driver(store, clock, RecordingSounds())
        fanfare = SignalCollector()
        completed = SignalCollector()
        d.fanfare.connect(fanfare)
        d.cycle_completed.connect(completed)
        d.start()
        advance(d, clock, 31)
        assert d.state == TimerState.IDLE
        assert len(fanfare) == 1
        assert len(completed) == 0
        assert d.is_polling
        advance(d, clock, 3)
        assert len(completed) == 1
        assert not d.is_polling

    def test_restart_during_fanfare_drops_old_completion(
        self, qapp, driver, store, clock,
    ):
        d = self._driver(store, clock, RecordingSounds())
        completed = SignalCollector()
        d.cycle_completed.connect(completed)
        d.start()
        advance(d, clock, 31)
        assert d.snapshot().fanfare_active
        d.start()
        advance(d, clock, 2.5)
        assert not d.snapshot().fanfare_active
        assert d.state == TimerState.WORKOUT
        assert len(completed) == 0
        assert d.is_polling
        # the new cycle still reports its own completion once
        advance(d, clock, 31)
        assert len(completed) == 1

    def test_stop_during_new_cycle_does_not_complete(
        self, qapp, driver, store, clock,
    ):
        d = self._driver(store, clock, None)
        completed = SignalCollector()
        d.cycle_completed.connect(completed)
        d.start()
        advance(d, clock, 31)
        d.start()
        clock.advance(0.5)
        d.stop()
        advance(d, clock, 3)
        assert d.state == TimerState.IDLE
        assert len(completed) == 0
        assert not d.is_polling

    def test_effects_are_reemitted(self, qapp, driver, store, clock):
        d = self._driver(store, clock, None)
        c = SignalCollector()
        d.effect_emitted.connect(c)
        d.start()
        advance(d, clock, 5.5)
        assert c.items == [PlayCue(CueKind.WORK_END)]

    def test_playback_failure_does_not_affect_timing(
        self, qapp, driver, store, clock, caplog,
    ):
        sounds = BrokenSounds()
        d = self._driver(store, clock, sounds)
        states = SignalCollector()
        d.state_changed.connect(states)
        with caplog.at_level(logging.WARNING, logger="intervaltimer.timer.driver"):
            d.start()
            advance(d, clock, 40)
        assert sounds.attempts == 7
        assert "Cue dropped" in caplog.text
        assert states.items == [
            TimerState.WORKOUT, TimerState.REST,
            TimerState.WORKOUT, TimerState.REST,
            TimerState.WORKOUT, TimerState.REST,
            TimerState.IDLE,
        ]

    def test_every_cue_kind_has_a_sound(self):
        assert set(CUE_SOUNDS) == set(CueKind)

    def test_fanfare_effect_without_sounds(self, qapp, driver, store, clock):
        d = self._driver(store, clock, None)
        c = SignalCollector()
        d.effect_emitted.connect(c)
        d.start()
        advance(d, clock, 31)
        assert c.items[-1] == TriggerFanfare()
