"""Command-line host: python -m intervaltimer."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from PyQt6.QtCore import QCoreApplication

from .config import FIELD_BOUNDS
from .errors import ValidationError
from .settings import SettingsStore
from .status import format_status
from .timer.driver import TimerDriver

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def _bounded(name: str, help_text: str) -> dict:
    low, high = FIELD_BOUNDS[name]
    return {
        "dest": name,
        "type": int,
        "default": None,
        "metavar": "N",
        "help": f"{help_text} ({low}-{high}); saved for next time",
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intervaltimer",
        description="Workout/rest interval timer with audio cues",
    )
    parser.add_argument(
        "--workout", **_bounded("workout_duration", "Workout seconds"),
    )
    parser.add_argument(
        "--rest", **_bounded("rest_duration", "Rest seconds"),
    )
    parser.add_argument(
        "--rounds", **_bounded("rounds", "Number of rounds"),
    )
    parser.add_argument(
        "--lead-up", **_bounded("lead_up_duration", "Lead-up seconds"),
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Settings file (default: the application support directory)",
    )
    parser.add_argument(
        "--show-settings",
        action="store_true",
        help="Print the stored configuration and exit",
    )
    parser.add_argument("--mute", action="store_true", help="Disable audio cues")
    parser.add_argument(
        "--volume", type=int, default=70, help="Cue volume 0-100",
    )
    parser.add_argument(
        "--sounds-dir", type=Path, default=None, help="Cue WAV cache directory",
    )
    parser.add_argument(
        "--cue-lead-up",
        action="store_true",
        help="Play a cue when the lead-up ends",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging",
    )
    return parser


def config_overrides(args: argparse.Namespace) -> dict[str, int]:
    return {
        name: getattr(args, name)
        for name in FIELD_BOUNDS
        if getattr(args, name) is not None
    }


def _make_sound_manager(args: argparse.Namespace):
    if args.mute:
        return None
    from .audio.sounds import SoundManager

    try:
        sounds = SoundManager(sounds_dir=args.sounds_dir)
    except OSError as exc:
        logger.warning("Audio cues unavailable: %s", exc)
        return None
    sounds.set_volume(args.volume)
    return sounds


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = SettingsStore(args.settings)

    if args.show_settings:
        for key, value in store.load().to_dict().items():
            print(f"{key} = {value}")
        return 0

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("IntervalTimer")
    app.setOrganizationName("IntervalTimer")

    driver = TimerDriver(
        store=store,
        sound_manager=_make_sound_manager(args),
        cue_lead_up_end=args.cue_lead_up,
    )

    overrides = config_overrides(args)
    if overrides:
        try:
            driver.configure(**overrides)
        except ValidationError as exc:
            parser.error(str(exc))

    config = driver.config
    print(
        f"Intervals: {config.rounds} x ({config.workout_duration}s work / "
        f"{config.rest_duration}s rest), lead-up {config.lead_up_duration}s"
    )

    driver.ticked.connect(
        lambda snap: print(f"\r{format_status(snap)}", end="", flush=True)
    )
    driver.cycle_completed.connect(app.quit)

    def _interrupt(signum, frame) -> None:
        driver.stop()
        app.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _interrupt)

    driver.start()
    code = app.exec()
    print()
    return code


if __name__ == "__main__":
    raise SystemExit(main())
