# src/tetris_flow/game/core/types.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ActivePiece:
    """
    The falling piece.

    shape is the CURRENT occupancy matrix (already rotated); (x, y) is its top-left anchor.
    Board replaces the whole record on spawn/step; fields are never mutated in place.
    """

    kind: str
    shape: np.ndarray
    x: int
    y: int
    hue: float = 0.0


@dataclass(frozen=True)
class MoveDecision:
    """
    Chosen placement for the current active piece.

    rotation: quarter turns (0..3) applied to the spawn shape
    column:   target anchor column (may be negative for shapes with a wide bounding box)
    landing_row: anchor row where the piece comes to rest under gravity
    """

    rotation: int
    column: int
    landing_row: int


@dataclass(frozen=True)
class BoardSnapshot:
    """
    Render-facing snapshot.

    Contracts:
      - grid is a COPY of the locked board (no active overlay); 0=empty, 1..K = kind_idx+1
      - kinds maps board ids back to kind tags (kinds[board_id - 1])
      - active is None while the board is game-over
    """

    rows: int
    cols: int
    grid: np.ndarray
    kinds: tuple[str, ...]
    active: ActivePiece | None
    game_over: bool

    min_lines_to_clear: int
    enable_line_clear: bool

    lines_cleared: int
    pieces_locked: int
    games_played: int

    def cell_kind(self, row: int, col: int) -> str | None:
        bid = int(self.grid[int(row), int(col)])
        if bid == 0:
            return None
        return self.kinds[bid - 1]

    def active_cells(self) -> list[tuple[int, int]]:
        """(row, col) of every occupied active-piece cell, in board coordinates."""
        ap = self.active
        if ap is None:
            return []
        ys, xs = np.nonzero(ap.shape)
        return [(int(ap.y + r), int(ap.x + c)) for r, c in zip(ys, xs)]


__all__ = ["ActivePiece", "MoveDecision", "BoardSnapshot"]
