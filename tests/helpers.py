"""Shared test helpers for IntervalTimer."""

from intervaltimer.timer.engine import IntervalScheduler


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def run_until(
    scheduler: IntervalScheduler,
    start: float,
    end: float,
    step: float = 0.1,
) -> tuple[list, list]:
    """Tick from *start* to *end* every *step* seconds.

    Returns ``(effects, states)`` where ``states`` lists each distinct
    state in the order it was entered.
    """
    effects: list = []
    states = [scheduler.state]
    # multiply rather than accumulate the step
    n = int(round((end - start) / step))
    for i in range(1, n + 1):
        effects.extend(scheduler.tick(start + i * step))
        if scheduler.state != states[-1]:
            states.append(scheduler.state)
    return effects, states
