# src/tetris_flow/runtime/tempo.py
from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

MIN_BPM: float = 10.0
SUBSTEP_FRACTION: float = 0.15


@dataclass
class Tempo:
    """
    Converts a beats-per-minute tempo into simulation intervals.

    decision interval: 60 / max(bpm, MIN_BPM) seconds between autopilot decisions
    sub-step interval: SUBSTEP_FRACTION of that, between executor sub-steps of a move
    """
    bpm: float = 300.0

    def clamp(self) -> None:
        self.bpm = max(MIN_BPM, float(self.bpm))

    def effective_bpm(self) -> float:
        return max(MIN_BPM, float(self.bpm))

    def decision_interval_s(self) -> float:
        return 60.0 / self.effective_bpm()

    def substep_interval_s(self) -> float:
        return self.decision_interval_s() * SUBSTEP_FRACTION

    def label(self) -> str:
        return f"{self.effective_bpm():g} bpm ({self.decision_interval_s() * 1000.0:.0f}ms)"


class RateMeter:
    """
    Sliding-window rate meter for events (ticks or locks).
    """
    def __init__(self, *, window: int = 60) -> None:
        self._t: Deque[float] = deque(maxlen=max(2, int(window)))

    def tick(self, now_s: Optional[float] = None) -> None:
        self._t.append(time.perf_counter() if now_s is None else float(now_s))

    def rate_hz(self) -> float:
        if len(self._t) < 2:
            return 0.0
        dt = self._t[-1] - self._t[0]
        if dt <= 1e-12:
            return 0.0
        return float(len(self._t) - 1) / dt

    def reset(self) -> None:
        self._t.clear()


__all__ = ["Tempo", "RateMeter", "MIN_BPM", "SUBSTEP_FRACTION"]
