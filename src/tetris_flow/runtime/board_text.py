# src/tetris_flow/runtime/board_text.py
from __future__ import annotations

from typing import Optional

from tetris_flow.game.core.types import BoardSnapshot

EMPTY_CHAR = "."
ACTIVE_CHAR = "@"


def _cell_char(kind: Optional[str]) -> str:
    return EMPTY_CHAR if kind is None else kind[0]


def render_board_text(snap: BoardSnapshot, *, border: bool = True) -> str:
    """
    Plain-text view of a snapshot: locked cells by kind letter, active piece as '@'.
    """
    rows = [
        [_cell_char(snap.cell_kind(r, c)) for c in range(snap.cols)]
        for r in range(snap.rows)
    ]

    for r, c in snap.active_cells():
        if 0 <= r < snap.rows and 0 <= c < snap.cols:
            rows[r][c] = ACTIVE_CHAR

    lines = ["".join(row) for row in rows]
    if not border:
        return "\n".join(lines)

    edge = "+" + "-" * snap.cols + "+"
    body = [f"|{line}|" for line in lines]
    return "\n".join([edge, *body, edge])


__all__ = ["render_board_text", "EMPTY_CHAR", "ACTIVE_CHAR"]
