# tests/test_board.py
from __future__ import annotations

import numpy as np
import pytest

from tetris_flow.game.core.board import Board, stamp_shape
from tetris_flow.game.core.pieceset import PieceSet
from tetris_flow.game.core.types import ActivePiece


def _board(rows: int = 20, cols: int = 10, min_lines: int = 1, **kw) -> Board:
    return Board(rows, cols, min_lines, rng=np.random.default_rng(0), **kw)


def test_new_board_is_empty_with_centered_spawn() -> None:
    b = _board()
    assert b.grid.shape == (20, 10)
    assert b.grid.dtype == np.uint8
    assert int(b.grid.sum()) == 0
    assert b.game_over is False
    ap = b.active
    assert ap is not None
    assert ap.y == 0
    assert ap.x == (10 - ap.shape.shape[1]) // 2
    assert ap.hue == pytest.approx(b.pieces.hue_of(ap.kind))


@pytest.mark.parametrize(
    "kwargs, exc",
    [
        ({"rows": 0, "cols": 10}, ValueError),
        ({"rows": 20, "cols": -1}, ValueError),
        ({"rows": True, "cols": 10}, TypeError),
        ({"rows": 20, "cols": 10, "min_lines_to_clear": 0}, ValueError),
    ],
)
def test_constructor_rejects_bad_dimensions(kwargs: dict, exc: type) -> None:
    with pytest.raises(exc):
        Board(**kwargs)


def test_collides_column_bounds_apply_above_the_top() -> None:
    b = _board(rows=6, cols=4)
    cell = np.ones((1, 1), dtype=np.uint8)
    assert b.collides(cell, 0, -3) is False
    assert b.collides(cell, -1, -3) is True
    assert b.collides(cell, 4, -3) is True


def test_collides_floor_and_locked_cells() -> None:
    b = _board(rows=6, cols=4)
    cell = np.ones((1, 1), dtype=np.uint8)
    assert b.collides(cell, 0, 5) is False
    assert b.collides(cell, 0, 6) is True
    b.grid[3, 2] = 1
    assert b.collides(cell, 2, 3) is True
    assert b.collides(cell, 1, 3) is False


def test_collides_ignores_empty_cells_of_the_shape() -> None:
    b = _board(rows=6, cols=4)
    t = np.array([[0, 1, 0], [1, 1, 1]], dtype=np.uint8)
    b.grid[4, 0] = 1
    # top-left corner of T is empty, so it may overlap the locked cell
    assert b.collides(t, 0, 4) is False
    assert b.collides(t, 0, 3) is True


def test_spawn_on_blocked_board_sets_game_over_without_active_piece() -> None:
    b = _board(rows=6, cols=6)
    b.grid[0, :] = 1
    assert b.spawn_piece() is False
    assert b.game_over is True
    assert b.active is None
    assert b.snapshot().active is None


def test_lock_writes_board_id_and_drops_out_of_range_cells() -> None:
    b = _board(rows=8, cols=4)
    i_shape = b.pieces.shape("I")
    b.active = ActivePiece(kind="I", shape=i_shape, x=-1, y=5)
    assert b.lock_piece() == 0
    assert b.grid[5, :3].tolist() == [1, 1, 1]
    assert b.grid[5, 3] == 0
    assert int(np.count_nonzero(b.grid)) == 3
    assert b.pieces_locked == 1
    assert b.active is not None


def test_lock_above_the_top_then_blocked_spawn_ends_game() -> None:
    b = _board(rows=6, cols=4, enable_line_clear=False)
    o = np.ones((2, 2), dtype=np.uint8)
    b.active = ActivePiece(kind="O", shape=o, x=0, y=-1)
    b.lock_piece()
    assert b.grid[0, :2].tolist() == [4, 4]
    assert int(np.count_nonzero(b.grid)) == 2

    # top row now full; no spawn position is free
    b.active = ActivePiece(kind="O", shape=o, x=2, y=-1)
    b.lock_piece()
    assert b.grid[0, :].tolist() == [4, 4, 4, 4]
    assert b.game_over is True
    assert b.active is None


def test_lock_without_active_piece_is_noop() -> None:
    b = _board(rows=6, cols=6)
    b.grid[0, :] = 1
    b.spawn_piece()
    before = b.grid.copy()
    assert b.lock_piece() == 0
    assert np.array_equal(b.grid, before)


def test_line_clear_removes_all_full_rows_and_shifts_the_rest() -> None:
    b = _board(rows=8, cols=4, min_lines=2)
    b.grid[[2, 5, 7], :] = 1
    b.grid[0, 1] = 3
    b.grid[6, 0] = 2
    b.grid[4, 3] = 5

    assert b.process_line_clears() == 3

    expected = np.zeros((8, 4), dtype=np.uint8)
    expected[3, 1] = 3  # old row 0
    expected[6, 3] = 5  # old row 4
    expected[7, 0] = 2  # old row 6
    assert np.array_equal(b.grid, expected)
    assert b.lines_cleared == 3


def test_below_threshold_full_rows_stay() -> None:
    b = _board(rows=8, cols=4, min_lines=2)
    b.grid[7, :] = 1
    b.grid[6, 2] = 4
    before = b.grid.copy()
    assert b.process_line_clears() == 0
    assert np.array_equal(b.grid, before)
    assert b.lines_cleared == 0


def test_lock_clears_when_enabled_only() -> None:
    b = _board(rows=6, cols=4)
    b.grid[5, :] = 1
    b.grid[4, :3] = 1
    b.active = ActivePiece(kind="I", shape=b.pieces.shape("I").T.copy(), x=3, y=2)
    assert b.lock_piece() == 2
    assert b.grid[5, 3] == 1

    s = _board(rows=6, cols=4, enable_line_clear=False)
    s.grid[5, :] = 1
    s.active = ActivePiece(kind="O", shape=np.ones((2, 2), dtype=np.uint8), x=0, y=3)
    assert s.lock_piece() == 0
    assert np.all(s.grid[5, :] == 1)


def test_threshold_setter_validates() -> None:
    b = _board()
    b.min_lines_to_clear = 3
    assert b.min_lines_to_clear == 3
    with pytest.raises(ValueError, match="positive"):
        b.min_lines_to_clear = 0


def test_reset_resizes_and_counts_games() -> None:
    b = _board()
    b.grid[19, :] = 1
    b.lines_cleared = 4
    b.reset(rows=12, cols=8, min_lines_to_clear=2)
    assert b.grid.shape == (12, 8)
    assert int(b.grid.sum()) == 0
    assert b.min_lines_to_clear == 2
    assert b.lines_cleared == 0
    assert b.games_played == 2
    assert b.game_over is False
    assert b.active is not None


def test_reset_rejects_bad_size() -> None:
    b = _board()
    with pytest.raises(ValueError):
        b.reset(rows=0)


def test_step_mutators() -> None:
    b = _board(rows=10, cols=10)
    ap = b.active
    assert ap is not None
    b.shift_active(1, 2)
    assert (b.active.x, b.active.y) == (ap.x + 1, ap.y + 2)
    b.rotate_active(4)
    assert np.array_equal(b.active.shape, ap.shape)
    b.grid[9, :] = 1
    b.active = ActivePiece(kind="O", shape=np.ones((2, 2), dtype=np.uint8), x=0, y=7)
    assert b.can_shift_active(0, 1) is False
    assert b.can_shift_active(1, 0) is True


def test_snapshot_does_not_alias_live_state() -> None:
    b = _board(rows=6, cols=6)
    snap = b.snapshot()
    snap.grid[0, 0] = 9
    assert b.grid[0, 0] == 0
    assert snap.active is not None
    assert snap.active.shape is not b.active.shape
    assert snap.kinds == b.pieces.kinds()


def test_stamp_shape_reports_written_cells() -> None:
    g = np.zeros((3, 3), dtype=np.uint8)
    n = stamp_shape(g, np.ones((2, 2), dtype=np.uint8), 2, -1, 7)
    assert n == 1
    assert g[0, 2] == 7


def test_rejected_reset_leaves_board_untouched() -> None:
    b = _board(rows=20, cols=10, min_lines=2)
    b.grid[19, :] = 1
    before = b.grid.copy()

    with pytest.raises(ValueError, match="cols"):
        b.reset(rows=12, cols=0)
    with pytest.raises(ValueError, match="min_lines_to_clear"):
        b.reset(rows=12, cols=8, min_lines_to_clear=0)

    assert (b.rows, b.cols, b.min_lines_to_clear) == (20, 10, 2)
    assert np.array_equal(b.grid, before)
    assert b.games_played == 1
    assert b.process_line_clears() == 0
    assert b.collides(np.ones((1, 1), dtype=np.uint8), 0, 19) is True


@pytest.mark.parametrize("rows, cols", [(4, 4), (4, 7), (5, 4), (6, 9), (20, 10)])
def test_first_spawn_never_ends_game_on_boards_fitting_every_piece(rows: int, cols: int) -> None:
    classic = PieceSet.classic7()
    w, h = classic.max_bbox_size()
    assert rows >= h and cols >= w

    for kind in classic.kinds():
        one = PieceSet(pieces={kind: classic.get(kind)}, kind_order=(kind,))
        b = Board(rows, cols, pieces=one, rng=np.random.default_rng(0))
        assert b.game_over is False, kind
        assert b.active is not None and b.active.kind == kind

        b.grid[:] = 1
        b.reset()
        assert b.game_over is False, kind
        assert b.active is not None
