# tests/test_metrics.py
from __future__ import annotations

import numpy as np
import pytest

from tetris_flow.game.core.metrics import (
    column_heights_from_occ,
    full_row_indices,
    placement_metrics_from_grid,
)


def _grid() -> np.ndarray:
    return np.array(
        [
            [0, 0, 0],
            [1, 0, 0],
            [0, 0, 1],
            [1, 1, 1],
        ],
        dtype=np.uint8,
    )


def test_column_heights_are_measured_from_the_bottom() -> None:
    heights = column_heights_from_occ(_grid() != 0)
    assert heights.tolist() == [3, 1, 2]


def test_placement_metrics_on_small_grid() -> None:
    m = placement_metrics_from_grid(_grid())
    assert m.agg_height == 6
    assert m.bumpiness == 3
    assert m.holes == 1
    assert m.complete_lines == 1
    assert m.max_height == 3


def test_empty_grid_has_zero_features() -> None:
    m = placement_metrics_from_grid(np.zeros((5, 4), dtype=np.uint8))
    assert (m.agg_height, m.complete_lines, m.holes, m.bumpiness, m.max_height) == (0, 0, 0, 0, 0)


def test_holes_count_every_empty_cell_below_a_filled_one() -> None:
    g = np.zeros((5, 2), dtype=np.uint8)
    g[0, 0] = 3
    assert placement_metrics_from_grid(g).holes == 4


def test_full_row_indices_are_ascending() -> None:
    g = np.zeros((6, 3), dtype=np.uint8)
    g[[4, 1], :] = 2
    assert full_row_indices(g).tolist() == [1, 4]


def test_metrics_reject_non_2d() -> None:
    with pytest.raises(ValueError, match="2D"):
        placement_metrics_from_grid(np.zeros(4, dtype=np.uint8))
