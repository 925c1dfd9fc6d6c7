# src/tetris_flow/runtime/executor.py
from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Optional

from tetris_flow.agents.autopilot import Autopilot
from tetris_flow.game.core.board import Board
from tetris_flow.game.core.constants import NUM_ROTATIONS
from tetris_flow.game.core.types import MoveDecision
from tetris_flow.runtime.tempo import Tempo

LOG = logging.getLogger(__name__)


class ExecutorPhase(Enum):
    IDLE = auto()
    ROTATING = auto()
    TRANSLATING = auto()
    DESCENDING = auto()


class MoveExecutor:
    """
    Applies autopilot decisions to the board one visible step at a time.

    Phases:
      IDLE -> ROTATING -> TRANSLATING -> DESCENDING -> (lock) -> IDLE

    Timing (elapsed seconds accumulate in a single timer, reset whenever it fires):
      - IDLE: once the timer exceeds the decision interval and a piece exists, decide.
      - otherwise: once the timer exceeds the sub-step interval, run one sub-step.

    Sub-step contract:
      - ROTATING applies all rotations at once, unchecked.
      - TRANSLATING moves one column toward the target, unchecked.
      - DESCENDING moves down one row if free, else locks.
      - Exactly one of these visible actions happens per sub-step; a phase with nothing
        to do hands over to the next phase within the same sub-step.
    """

    def __init__(self, board: Board, autopilot: Optional[Autopilot] = None) -> None:
        self.board = board
        self.autopilot = autopilot or Autopilot()
        self.phase = ExecutorPhase.IDLE
        self.decision: MoveDecision | None = None
        self._timer = 0.0

    @property
    def timer_s(self) -> float:
        return self._timer

    def is_idle(self) -> bool:
        return self.phase is ExecutorPhase.IDLE

    def cancel(self) -> None:
        """Drop any in-flight decision; partially applied steps stay on the board as they are."""
        self.phase = ExecutorPhase.IDLE
        self.decision = None

    def begin(self, decision: MoveDecision) -> None:
        self.decision = decision
        self.phase = ExecutorPhase.ROTATING
        self._timer = 0.0

    def update(self, elapsed_s: float, tempo: Tempo) -> None:
        self._timer += float(elapsed_s)

        if self.phase is ExecutorPhase.IDLE:
            if self._timer > tempo.decision_interval_s() and self.board.active is not None:
                self.begin(self.autopilot.decide(self.board))
        elif self._timer > tempo.substep_interval_s():
            self.substep()
            self._timer = 0.0

    def substep(self) -> None:
        d = self.decision
        ap = self.board.active
        if d is None or ap is None:
            self.cancel()
            return

        if self.phase is ExecutorPhase.ROTATING:
            self.phase = ExecutorPhase.TRANSLATING
            turns = int(d.rotation) % NUM_ROTATIONS
            if turns > 0:
                self.board.rotate_active(turns)
                return

        if self.phase is ExecutorPhase.TRANSLATING:
            x = self.board.active.x
            if x != d.column:
                self.board.shift_active(1 if d.column > x else -1, 0)
                if self.board.active.x == d.column:
                    self.phase = ExecutorPhase.DESCENDING
                return
            self.phase = ExecutorPhase.DESCENDING

        if self.phase is ExecutorPhase.DESCENDING:
            if self.board.can_shift_active(0, 1):
                self.board.shift_active(0, 1)
                return
            cleared = self.board.lock_piece()
            if cleared:
                LOG.debug("locked with %d line(s) cleared", cleared)
            self.cancel()


__all__ = ["ExecutorPhase", "MoveExecutor"]
