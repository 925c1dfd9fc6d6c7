# src/tetris_flow/game/core/metrics.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from tetris_flow.game.core.constants import EMPTY_CELL


@dataclass(frozen=True)
class PlacementMetrics:
    """
    Heuristic features of a (simulated) locked grid.

    agg_height:
      sum of column heights (height = rows - first occupied row, 0 for an empty column)
    complete_lines:
      rows with no empty cell, regardless of whether the clear threshold would remove them
    holes:
      empty cells that have at least one occupied cell above in same column
    bumpiness:
      sum(abs(h[i+1] - h[i])) over column heights
    """
    agg_height: int
    complete_lines: int
    holes: int
    bumpiness: int
    max_height: int


def placement_metrics_from_grid(grid: np.ndarray) -> PlacementMetrics:
    """
    Compute heuristic features from a grid of board ids (EMPTY_CELL = empty).

    The grid is only read; temporaries are small bool/int arrays.
    """
    _ensure_2d_grid(grid)

    occ = _occ_from_grid(grid)
    heights = column_heights_from_occ(occ)

    return PlacementMetrics(
        agg_height=int(heights.sum()) if heights.size > 0 else 0,
        complete_lines=_complete_lines_from_occ(occ),
        holes=_count_holes_from_occ(occ),
        bumpiness=_bumpiness_from_heights(heights),
        max_height=int(heights.max()) if heights.size > 0 else 0,
    )


def full_row_indices(grid: np.ndarray) -> np.ndarray:
    """Ascending indices of rows with zero empty cells."""
    _ensure_2d_grid(grid)
    return np.flatnonzero(np.all(_occ_from_grid(grid), axis=1))


def column_heights_from_occ(occ: np.ndarray) -> np.ndarray:
    if occ.ndim != 2:
        raise ValueError(f"occ must be 2D, got shape={occ.shape}")

    h, _w = occ.shape
    any_filled = occ.any(axis=0)

    # argmax returns 0 when all-false; mask those to 0 height
    first_filled = np.argmax(occ, axis=0)
    return np.where(any_filled, h - first_filled, 0).astype(np.int64, copy=False)


# -----------------------------------------------------------------------------
# Internals
# -----------------------------------------------------------------------------
def _ensure_2d_grid(grid: np.ndarray) -> None:
    if not isinstance(grid, np.ndarray):
        raise TypeError(f"grid must be np.ndarray, got {type(grid).__name__}")
    if grid.ndim != 2:
        raise ValueError(f"grid must be 2D, got shape={getattr(grid, 'shape', None)}")


def _occ_from_grid(grid: np.ndarray) -> np.ndarray:
    return np.not_equal(grid, EMPTY_CELL)


def _complete_lines_from_occ(occ: np.ndarray) -> int:
    if occ.shape[1] == 0:
        return 0
    return int(np.all(occ, axis=1).sum())


def _count_holes_from_occ(occ: np.ndarray) -> int:
    # filled_seen[y,x] True if any filled cell exists at or above y in that column
    filled_seen = np.maximum.accumulate(occ, axis=0)
    return int(np.sum((~occ) & filled_seen))


def _bumpiness_from_heights(heights: np.ndarray) -> int:
    if heights.size <= 1:
        return 0
    return int(np.abs(np.diff(heights)).sum())


__all__ = [
    "PlacementMetrics",
    "placement_metrics_from_grid",
    "full_row_indices",
    "column_heights_from_occ",
]
