# src/tetris_flow/agents/autopilot.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from tetris_flow.game.core.board import Board, stamp_shape
from tetris_flow.game.core.constants import NUM_ROTATIONS, SEARCH_MARGIN
from tetris_flow.game.core.metrics import PlacementMetrics, placement_metrics_from_grid
from tetris_flow.game.core.types import MoveDecision

LOG = logging.getLogger(__name__)

# Marker written into the scratch grid for simulated cells; any non-empty id works.
_SCRATCH_ID: int = 255


@dataclass(frozen=True)
class HeuristicWeights:
    # score = a*agg_height + b*complete_lines + c*holes + d*bumpiness
    a_agg_height: float = -0.51
    b_lines: float = 0.76
    c_holes: float = -0.60
    d_bumpiness: float = -0.30

    @classmethod
    def line_clear(cls) -> "HeuristicWeights":
        """Rows actually clear: stack height is transient, keep it low."""
        return cls()

    @classmethod
    def stacking(cls) -> "HeuristicWeights":
        """Rows never clear: height matters less, full rows are rewarded as neatness."""
        return cls(a_agg_height=-0.20, b_lines=1.50)

    def score(self, m: PlacementMetrics) -> float:
        return (
                self.a_agg_height * float(m.agg_height)
                + self.b_lines * float(m.complete_lines)
                + self.c_holes * float(m.holes)
                + self.d_bumpiness * float(m.bumpiness)
        )


class Autopilot:
    """
    Exhaustive one-piece placement search scored by a fixed linear heuristic.

    Search order (ties keep the first candidate found):
      - rotation 0..3 (outer), each state obtained by rotating the previous one
      - anchor column -SEARCH_MARGIN .. cols+SEARCH_MARGIN-1 (inner)

    A candidate blocked at row 0 is skipped; otherwise the piece falls row by row from
    the top until the next row collides, and that rest position is scored.

    The weight profile is picked per call from board.enable_line_clear, so toggling the
    setting takes effect on the next decision. The search never mutates the board.
    """

    def __init__(
            self,
            *,
            line_clear_weights: Optional[HeuristicWeights] = None,
            stacking_weights: Optional[HeuristicWeights] = None,
    ) -> None:
        self.line_clear_weights = line_clear_weights or HeuristicWeights.line_clear()
        self.stacking_weights = stacking_weights or HeuristicWeights.stacking()

    def weights_for(self, board: Board) -> HeuristicWeights:
        return self.line_clear_weights if board.enable_line_clear else self.stacking_weights

    @staticmethod
    def drop_row(board: Board, shape: np.ndarray, x: int) -> int:
        """Rest row for `shape` at column `x` falling from row 0. Caller ensures row 0 is free."""
        y = 0
        while not board.collides(shape, x, y + 1):
            y += 1
        return y

    @staticmethod
    def candidates(board: Board, shape: np.ndarray) -> Iterator[Tuple[int, np.ndarray, int]]:
        """Yield (rotation, rotated_shape, x) in search order, before collision filtering."""
        s = shape
        for rot in range(NUM_ROTATIONS):
            for x in range(-SEARCH_MARGIN, int(board.cols) + SEARCH_MARGIN):
                yield rot, s, x
            s = board.rotate(s)

    def metrics(self, board: Board, shape: np.ndarray, x: int, y: int) -> PlacementMetrics:
        scratch = board.copy_grid()
        stamp_shape(scratch, shape, x, y, _SCRATCH_ID)
        return placement_metrics_from_grid(scratch)

    def evaluate(self, board: Board, shape: np.ndarray, x: int, y: int) -> float:
        """
        Score `shape` locked at (x, y) on a scratch copy of the board grid.

        complete_lines counts every full row of the simulated grid, independent of the
        engine's clear threshold.
        """
        return self.weights_for(board).score(self.metrics(board, shape, x, y))

    def decide(self, board: Board) -> MoveDecision:
        ap = board.active
        if ap is None:
            return MoveDecision(rotation=0, column=0, landing_row=0)

        best_score = -float("inf")
        best = MoveDecision(rotation=0, column=int(ap.x), landing_row=0)
        found = False

        for rot, shape, x in self.candidates(board, ap.shape):
            if board.collides(shape, x, 0):
                continue
            y = self.drop_row(board, shape, x)
            s = self.evaluate(board, shape, x, y)
            if (not found) or (s > best_score):
                found = True
                best_score = s
                best = MoveDecision(rotation=int(rot), column=int(x), landing_row=int(y))

        if found:
            LOG.debug(
                "decide kind=%s rot=%d col=%d row=%d score=%.3f",
                ap.kind, best.rotation, best.column, best.landing_row, best_score,
            )
        else:
            LOG.debug("decide kind=%s: no legal placement, keeping column %d", ap.kind, ap.x)
        return best


__all__ = ["HeuristicWeights", "Autopilot"]
