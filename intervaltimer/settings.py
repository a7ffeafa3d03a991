"""Configuration persistence as JSON.

Settings are stored at:
    ~/Library/Application Support/IntervalTimer/settings.json

Usage::

    store = SettingsStore()
    config = store.load()
    store.save(config.replace(rounds=8))

A missing or corrupted file never raises from :meth:`SettingsStore.load`:
defaults are substituted and written back so the next load is stable.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .config import Configuration
from .errors import PersistenceError

logger = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "IntervalTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


class SettingsStore:
    """Load and save a :class:`Configuration` to a single JSON file."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path:
        # SETTINGS_PATH is looked up on every call.
        return self._path if self._path is not None else SETTINGS_PATH

    def load(self) -> Configuration:
        """Read the stored configuration, repairing the file if needed."""
        path = self.path
        if not path.exists():
            config = Configuration()
            self._persist_quietly(config)
            return config

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning(
                "Settings file %s unreadable (%s); using defaults", path, exc,
            )
            config = Configuration()
            self._persist_quietly(config)
            return config

        if not isinstance(data, dict):
            logger.warning(
                "Settings file %s does not hold an object; using defaults", path,
            )
            config = Configuration()
            self._persist_quietly(config)
            return config

        config, rejected = Configuration.from_mapping(data)
        if rejected:
            logger.warning(
                "Invalid settings %s in %s replaced by defaults",
                ", ".join(rejected), path,
            )
            self._persist_quietly(config)
        return config

    def save(self, config: Configuration) -> None:
        """Write *config* as JSON.  Raises :class:`PersistenceError`."""
        path = self.path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(config.to_dict(), indent=2) + "\n",
                encoding="utf-8",
            )
        except OSError as exc:
            raise PersistenceError(f"could not write {path}: {exc}") from exc

    def _persist_quietly(self, config: Configuration) -> None:
        try:
            self.save(config)
        except PersistenceError as exc:
            logger.warning("%s", exc)


def load_settings() -> Configuration:
    """Load the configuration from the default settings path."""
    return SettingsStore().load()


def save_settings(config: Configuration) -> None:
    """Write *config* to the default settings path."""
    SettingsStore().save(config)
