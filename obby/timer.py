"""A countdown timer driven by frame time."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Timer:
    """Counts down from ``timer_start_sec``; zero means stopped or finished."""

    timer_sec: float = 0.0
    timer_start_sec: float = 0.0

    def start(self, timer_sec: float) -> None:
        self.timer_sec = timer_sec
        self.timer_start_sec = timer_sec

    def restart(self) -> None:
        self.timer_sec = self.timer_start_sec

    def alpha(self) -> float:
        """Fraction of the countdown that has elapsed."""
        if self.timer_start_sec > 0.0:
            elapsed = self.timer_start_sec - self.timer_sec
            return elapsed / self.timer_start_sec
        return 1.0

    def tick(self, dt: float) -> bool:
        """Advance by ``dt``; True only on the tick that reaches zero."""
        if self.timer_sec == 0.0:
            return False
        self.timer_sec -= dt
        if self.timer_sec <= 0.0:
            self.timer_sec = 0.0
            return True
        return False

    def done(self) -> bool:
        return self.timer_sec == 0.0