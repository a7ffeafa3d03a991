"""Cue synthesis and playback using numpy + QSoundEffect.

Every cue is generated programmatically as a WAV file from sine tones
shaped by ADSR envelopes.  Files are cached to disk so later launches
skip synthesis.

Cue names
---------
- ``work_start``  - bright ascending chime (optional lead-up end cue)
- ``work_end``    - soft bell: workout over, rest begins
- ``rest_end``    - rising double beep: back to work
- ``complete``    - achievement arpeggio after the final rest
- ``fanfare``     - longer celebratory fanfare for the completion overlay
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable, Sequence

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..errors import PlaybackUnavailableError

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "IntervalTimer"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "work_start",
    "work_end",
    "rest_end",
    "complete",
    "fanfare",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(
    length: int,
    attack: int,
    decay: int,
    sustain_level: float,
    release: int,
) -> np.ndarray:
    """ADSR gain curve, durations in samples, clipped to *length*."""
    env = np.full(length, sustain_level, dtype=np.float64)
    a_end = min(attack, length)
    d_end = min(a_end + decay, length)
    r_start = max(length - release, d_end)
    if a_end:
        env[:a_end] = np.linspace(0.0, 1.0, a_end)
    if d_end > a_end:
        env[a_end:d_end] = np.linspace(1.0, sustain_level, d_end - a_end)
    if r_start < length:
        env[r_start:] = np.linspace(sustain_level, 0.0, length - r_start)
    return env


def _tone(
    freq: float,
    seconds: float,
    amplitude: float,
    *,
    overtone: float = 0.0,
    sustain_level: float = 0.4,
    release_fraction: float = 0.4,
) -> np.ndarray:
    """Enveloped sine at *freq* Hz, optionally with an octave overtone."""
    n = int(SAMPLE_RATE * seconds)
    t = np.arange(n) / SAMPLE_RATE
    wave_ = np.sin(2 * np.pi * freq * t) * amplitude
    if overtone:
        wave_ += np.sin(4 * np.pi * freq * t) * overtone
    env = _envelope(
        n,
        attack=min(100, n // 10),
        decay=n // 5,
        sustain_level=sustain_level,
        release=int(n * release_fraction),
    )
    return wave_ * env


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _sequence(
    notes: Sequence[float],
    note_seconds: float,
    gap_seconds: float,
    amplitude: float,
    *,
    final_seconds: float | None = None,
    final_overtone: float = 0.0,
) -> np.ndarray:
    """Notes played one after another; the last may be held longer."""
    parts: list[np.ndarray] = []
    for i, freq in enumerate(notes):
        last = i == len(notes) - 1
        if last and final_seconds is not None:
            parts.append(_tone(
                freq, final_seconds, amplitude,
                overtone=final_overtone, sustain_level=0.5,
                release_fraction=0.6,
            ))
        else:
            parts.append(_tone(freq, note_seconds, amplitude))
        parts.append(_silence(gap_seconds))
    return np.concatenate(parts)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Float samples in [-1, 1] → 16-bit mono PCM WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_work_start() -> bytes:
    # C5 → E5 → G5
    return _to_wav_bytes(_sequence([523.25, 659.25, 783.99], 0.12, 0.03, 0.6))


def _generate_work_end() -> bytes:
    # A4 bell with a slow tail
    bell = _tone(440.0, 1.0, 0.35, overtone=0.08, sustain_level=0.25,
                 release_fraction=0.55)
    return _to_wav_bytes(bell)


def _generate_rest_end() -> bytes:
    # E5 then A5, short and punchy
    return _to_wav_bytes(_sequence([659.25, 880.0], 0.09, 0.07, 0.5))


def _generate_complete() -> bytes:
    # C5 → E5 → G5 → C6, top note held
    return _to_wav_bytes(_sequence(
        [523.25, 659.25, 783.99, 1046.50], 0.10, 0.02, 0.5,
        final_seconds=0.35,
    ))


def _generate_fanfare() -> bytes:
    # G4 → B4 → D5 → G5, wide intervals, long rich ending
    return _to_wav_bytes(_sequence(
        [392.00, 493.88, 587.33, 783.99], 0.15, 0.03, 0.5,
        final_seconds=0.5, final_overtone=0.1,
    ))


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "work_start": _generate_work_start,
    "work_end": _generate_work_end,
    "rest_end": _generate_rest_end,
    "complete": _generate_complete,
    "fanfare": _generate_fanfare,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Owns one ``QSoundEffect`` per cue for the lifetime of the app.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("work_end")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a cue by name.  No-op if disabled or name unknown.

        Raises :class:`PlaybackUnavailableError` for a known cue whose
        effect could not be loaded.
        """
        if not self._enabled:
            return
        if name not in _GENERATORS:
            logger.debug("Unknown cue %r ignored", name)
            return
        effect = self._effects.get(name)
        if effect is None or effect.status() == QSoundEffect.Status.Error:
            raise PlaybackUnavailableError(f"cue {name!r} is not loaded")
        effect.play()

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def sounds_dir(self) -> Path:
        return self._sounds_dir

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Synthesise any cue missing from the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, generate in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(generate())

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
