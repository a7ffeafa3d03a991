"""One-line text rendering of a timer snapshot."""

from __future__ import annotations

from .timer.engine import TimerSnapshot, TimerState


STATE_LABELS: dict[TimerState, str] = {
    TimerState.IDLE:           "READY",
    TimerState.LEAD_UP:        "GET READY",
    TimerState.WORKOUT:        "WORKOUT",
    TimerState.REST:           "REST",
    TimerState.PAUSED_LEAD_UP: "PAUSED (GET READY)",
    TimerState.PAUSED_WORKOUT: "PAUSED (WORKOUT)",
    TimerState.PAUSED_REST:    "PAUSED (REST)",
}

BAR_WIDTH = 20


def fmt_time(seconds: int) -> str:
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"


def progress_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    filled = int(round(max(0.0, min(1.0, fraction)) * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def format_status(snap: TimerSnapshot) -> str:
    if snap.fanfare_active and snap.state is TimerState.IDLE:
        return f"DONE! {snap.rounds} rounds complete"
    return (
        f"{STATE_LABELS[snap.state]:<18} "
        f"Round {snap.display_round}/{snap.rounds}  "
        f"{fmt_time(snap.remaining_seconds)} "
        f"{progress_bar(snap.progress_fraction)} "
        f"{snap.progress_fraction:4.0%}"
    )
