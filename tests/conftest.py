"""Shared pytest fixtures for IntervalTimer tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from intervaltimer.config import Configuration
from intervaltimer.settings import SettingsStore
from intervaltimer.timer.driver import TimerDriver
from intervaltimer.timer.engine import IntervalScheduler

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def settings_path(tmp_path, monkeypatch):
    """Point the default settings location at a per-test temp file."""
    path = tmp_path / "settings.json"
    monkeypatch.setattr("intervaltimer.settings.SETTINGS_PATH", path)
    monkeypatch.setattr("intervaltimer.settings.APP_SUPPORT_DIR", tmp_path)
    yield path


@pytest.fixture
def config():
    """Short intervals with no lead-up: 3 x (5s work / 5s rest)."""
    return Configuration(
        workout_duration=5, rest_duration=5, rounds=3, lead_up_duration=0,
    )


@pytest.fixture
def scheduler(config):
    return IntervalScheduler(config)


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def store(settings_path):
    return SettingsStore(settings_path)


@pytest.fixture
def driver(qapp, store, clock, config):
    """TimerDriver on a fake clock, no audio, persisting to a temp file."""
    store.save(config)
    return TimerDriver(parent=None, store=store, clock=clock)
