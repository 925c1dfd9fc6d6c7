# src/tetris_flow/game/core/board.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

import numpy as np

from tetris_flow.game.core.constants import EMPTY_CELL
from tetris_flow.game.core.metrics import full_row_indices
from tetris_flow.game.core.piece_rules import BagPieceRule, PieceRule
from tetris_flow.game.core.pieceset import PieceSet, rotate_shape
from tetris_flow.game.core.types import ActivePiece, BoardSnapshot

LOG = logging.getLogger(__name__)


def _require_positive_int(value: object, *, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"{where} must be an int, got {type(value)!r}")
    v = int(value)
    if v <= 0:
        raise ValueError(f"{where} must be positive, got {v}")
    return v


def stamp_shape(grid: np.ndarray, shape: np.ndarray, x: int, y: int, value: int) -> int:
    """
    Write `value` into every cell of `grid` covered by an occupied cell of `shape` at (x, y).

    Cells landing outside the grid are dropped, never written.
    Returns the number of cells written.
    """
    assert shape.ndim == 2, f"shape must be 2D, got ndim={shape.ndim}"
    h, w = grid.shape
    ys, xs = np.nonzero(shape)
    rr = ys + int(y)
    cc = xs + int(x)
    keep = (rr >= 0) & (rr < h) & (cc >= 0) & (cc < w)
    grid[rr[keep], cc[keep]] = value
    return int(keep.sum())


class Board:
    """
    Falling-block board: locked grid + active piece + spawn/lock/clear rules.

    Contracts:

      - grid is the authoritative LOCKED board (0=empty, 1..K = kind_idx+1), row 0 on top.
      - active is None exactly while game_over is True (no partial piece exists).
      - collides() treats cells above row 0 as free; only column bounds apply there.
      - line clearing removes ALL full rows, but only when their count reaches min_lines_to_clear;
        below the threshold full rows stay in place.
      - game over is a flag, never an exception; the driver resets.
    """

    def __init__(
            self,
            rows: int,
            cols: int,
            min_lines_to_clear: int = 1,
            *,
            enable_line_clear: bool = True,
            pieces: Optional[PieceSet] = None,
            piece_rule: Optional[PieceRule] = None,
            rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.rows = _require_positive_int(rows, where="rows")
        self.cols = _require_positive_int(cols, where="cols")
        self._min_lines_to_clear = _require_positive_int(min_lines_to_clear, where="min_lines_to_clear")
        self.enable_line_clear = bool(enable_line_clear)

        self.pieces = pieces if pieces is not None else PieceSet.classic7()
        if len(self.pieces) == 0:
            raise ValueError("PieceSet has no kinds (empty pieceset is invalid).")

        self._rng: np.random.Generator = rng if rng is not None else np.random.default_rng()
        self._piece_rule: PieceRule = piece_rule or BagPieceRule()

        self.grid = np.zeros((self.rows, self.cols), dtype=np.uint8)
        self.active: ActivePiece | None = None
        self.game_over = False

        self.lines_cleared = 0
        self.pieces_locked = 0
        self.games_played = 1

        self._piece_rule.reset(rng=self._rng, kinds=self.pieces.kinds())
        self.spawn_piece()

    # ---- settings ------------------------------------------------------------------

    @property
    def min_lines_to_clear(self) -> int:
        return self._min_lines_to_clear

    @min_lines_to_clear.setter
    def min_lines_to_clear(self, value: int) -> None:
        self._min_lines_to_clear = _require_positive_int(value, where="min_lines_to_clear")

    # ---- lifecycle -----------------------------------------------------------------

    def reset(
            self,
            rows: Optional[int] = None,
            cols: Optional[int] = None,
            min_lines_to_clear: Optional[int] = None,
    ) -> None:
        """
        Reallocate an empty grid (resized if dimensions are given), clear game over,
        refill the bag and spawn a fresh piece.

        All arguments are validated before any is applied; a rejected reset leaves the board as it was.
        """
        new_rows = self.rows if rows is None else _require_positive_int(rows, where="rows")
        new_cols = self.cols if cols is None else _require_positive_int(cols, where="cols")
        new_min = (
            self._min_lines_to_clear
            if min_lines_to_clear is None
            else _require_positive_int(min_lines_to_clear, where="min_lines_to_clear")
        )

        self.rows = new_rows
        self.cols = new_cols
        self._min_lines_to_clear = new_min

        self.grid = np.zeros((self.rows, self.cols), dtype=np.uint8)
        self.active = None
        self.game_over = False
        self.lines_cleared = 0
        self.pieces_locked = 0
        self.games_played += 1

        self._piece_rule.reset(rng=self._rng, kinds=self.pieces.kinds())
        self.spawn_piece()

    # ---- geometry ------------------------------------------------------------------

    @staticmethod
    def rotate(shape: np.ndarray) -> np.ndarray:
        """Quarter turn clockwise. Geometric only: no collision check, no wall kicks."""
        return rotate_shape(shape)

    def collides(self, shape: np.ndarray, x: int, y: int) -> bool:
        """
        True iff an occupied cell of `shape` with top-left at (x, y) leaves the column range,
        reaches row >= rows, or overlaps a locked cell at row >= 0.
        """
        assert shape.ndim == 2, f"shape must be 2D, got ndim={shape.ndim}"
        ys, xs = np.nonzero(shape)
        rr = ys + int(y)
        cc = xs + int(x)
        if np.any((cc < 0) | (cc >= self.cols) | (rr >= self.rows)):
            return True
        visible = rr >= 0
        return bool(np.any(self.grid[rr[visible], cc[visible]] != EMPTY_CELL))

    # ---- piece flow ----------------------------------------------------------------

    def spawn_piece(self) -> bool:
        """
        Draw the next kind and place it centered on row 0.

        Returns False (and sets game_over, leaving no active piece) if the spawn position is blocked.
        """
        kind = self._piece_rule.next_piece()
        shape = self.pieces.shape(kind)
        x = (self.cols - int(shape.shape[1])) // 2
        y = 0

        if self.collides(shape, x, y):
            self.active = None
            self.game_over = True
            LOG.debug("spawn blocked: kind=%s x=%d (pieces_locked=%d)", kind, x, self.pieces_locked)
            return False

        self.active = ActivePiece(kind=kind, shape=shape, x=x, y=y, hue=self.pieces.hue_of(kind))
        return True

    def lock_piece(self) -> int:
        """
        Write the active piece into the grid, clear lines (if enabled), then spawn the next piece.

        Returns the number of rows removed. No-op (returns 0) without an active piece.
        """
        ap = self.active
        if ap is None:
            return 0

        stamp_shape(self.grid, ap.shape, ap.x, ap.y, self.pieces.board_id(ap.kind))
        self.active = None
        self.pieces_locked += 1

        cleared = 0
        if self.enable_line_clear:
            cleared = self.process_line_clears()

        self.spawn_piece()
        return cleared

    def process_line_clears(self) -> int:
        """
        Remove every full row if their count reaches min_lines_to_clear; pad empty rows on top.

        Returns the number of rows removed (0 when below threshold; the grid is then untouched).
        """
        full = full_row_indices(self.grid)
        n = int(full.size)
        if n == 0 or n < self._min_lines_to_clear:
            return 0

        keep = np.ones(self.rows, dtype=bool)
        keep[full] = False
        new_rows = np.zeros((n, self.cols), dtype=self.grid.dtype)
        self.grid = np.vstack([new_rows, self.grid[keep]])
        self.lines_cleared += n
        return n

    # ---- step mutators (used by the move executor) ---------------------------------

    def rotate_active(self, times: int = 1) -> None:
        """Rotate the active piece's shape in place of its anchor. Unchecked."""
        ap = self.active
        if ap is None:
            return
        shape = ap.shape
        for _ in range(int(times)):
            shape = self.rotate(shape)
        self.active = replace(ap, shape=shape)

    def shift_active(self, dx: int, dy: int) -> None:
        """Move the active piece anchor by (dx, dy). Unchecked."""
        ap = self.active
        if ap is None:
            return
        self.active = replace(ap, x=int(ap.x + dx), y=int(ap.y + dy))

    def can_shift_active(self, dx: int, dy: int) -> bool:
        ap = self.active
        if ap is None:
            return False
        return not self.collides(ap.shape, ap.x + int(dx), ap.y + int(dy))

    # ---- read side -----------------------------------------------------------------

    def copy_grid(self) -> np.ndarray:
        return self.grid.copy()

    def snapshot(self) -> BoardSnapshot:
        """
        Immutable copy of everything a renderer reads. Never aliases the live grid.
        """
        ap = self.active
        if ap is not None:
            ap = replace(ap, shape=ap.shape.copy())
        return BoardSnapshot(
            rows=int(self.rows),
            cols=int(self.cols),
            grid=self.grid.copy(),
            kinds=self.pieces.kinds(),
            active=ap,
            game_over=bool(self.game_over),
            min_lines_to_clear=int(self._min_lines_to_clear),
            enable_line_clear=bool(self.enable_line_clear),
            lines_cleared=int(self.lines_cleared),
            pieces_locked=int(self.pieces_locked),
            games_played=int(self.games_played),
        )


__all__ = ["Board", "stamp_shape"]
