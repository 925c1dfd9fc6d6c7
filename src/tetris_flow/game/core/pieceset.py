# src/tetris_flow/game/core/pieceset.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import yaml

from tetris_flow.game.core.constants import NUM_ROTATIONS
from tetris_flow.utils.paths import pieces_dir


def rotate_shape(shape: np.ndarray) -> np.ndarray:
    """
    Rotate a 0/1 occupancy matrix a quarter turn clockwise (transpose of the row-reversed matrix).

    Pure: returns a new contiguous array, never a view of the input.
    """
    m = np.asarray(shape)
    assert m.ndim == 2, f"shape must be 2D, got ndim={m.ndim}"
    return np.ascontiguousarray(m[::-1].T)


def _parse_hue(v: object, *, kind: str) -> float:
    if v is None:
        return 0.0
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise TypeError(f"{kind!r}: hue must be a number, got {type(v)!r}")
    hue = float(v)
    if not (0.0 <= hue < 1.0):
        raise ValueError(f"{kind!r}: hue must be in [0,1), got {hue}")
    return hue


def _parse_shape(rows: Sequence[str]) -> np.ndarray:
    if not isinstance(rows, (list, tuple)) or len(rows) == 0:
        raise ValueError("shape must be a non-empty list of strings")

    width = None
    out: List[List[int]] = []
    for r in rows:
        if not isinstance(r, str) or len(r) == 0:
            raise ValueError(f"shape rows must be non-empty strings, got {r!r}")
        if width is None:
            width = len(r)
        elif len(r) != width:
            raise ValueError(f"shape rows must have equal width, got widths {width} and {len(r)}")

        out.append([1 if ch == "#" else 0 for ch in r])

    arr = np.asarray(out, dtype=np.uint8)
    if int(arr.sum()) <= 0:
        raise ValueError("shape must have at least one filled cell ('#')")
    return arr


@dataclass(frozen=True)
class PieceDef:
    kind: str
    shape: np.ndarray  # (H,W) uint8 mask 0/1, spawn orientation
    hue: float = 0.0  # renderer-only hue offset

    def cell_count(self) -> int:
        return int(self.shape.sum())

    def rotations(self) -> Tuple[np.ndarray, ...]:
        """All quarter-turn states, starting from the base shape."""
        out = [self.shape]
        for _ in range(NUM_ROTATIONS - 1):
            out.append(rotate_shape(out[-1]))
        return tuple(out)


@dataclass(frozen=True)
class PieceSet:
    """
    Pure geometry + renderer hue offsets, loaded from YAML.

    Provides:
      - stable ordering of kinds (for kind-index mapping and bag fills)
      - shape(kind): the base occupancy matrix
      - board_id(kind) in 1..K (for categorical board grids; 0 reserved for empty)

    Asset contract:
      - only the spawn orientation is stored; rotation is computed with rotate_shape().
    """

    pieces: Dict[str, PieceDef]
    kind_order: Tuple[str, ...]

    @staticmethod
    def default_classic7_path() -> Path:
        return pieces_dir() / "classic7.yaml"

    @classmethod
    def classic7(cls) -> "PieceSet":
        return cls.from_yaml(cls.default_classic7_path())

    @classmethod
    def from_yaml(cls, path: Path, *, expected_cells: Optional[int] = None) -> "PieceSet":
        p = Path(path)
        data = yaml.safe_load(p.read_text(encoding="utf-8"))

        if not isinstance(data, dict):
            raise ValueError(f"piece YAML must be a mapping at top-level, got {type(data)!r}")

        if expected_cells is None:
            v = data.get("expected_cells", None)
            if isinstance(v, int):
                expected_cells = v
            elif isinstance(v, str):
                expected_cells = int(v)
            elif v is None:
                expected_cells = None
            else:
                raise TypeError(f"expected_cells must be int or str, got {type(v)!r}")

        pieces_node = data.get("pieces")
        if not isinstance(pieces_node, dict) or not pieces_node:
            raise ValueError("piece YAML must contain non-empty mapping 'pieces:'")

        pieces: Dict[str, PieceDef] = {}
        kind_order: List[str] = []

        for kind, spec in pieces_node.items():
            if not isinstance(kind, str) or not kind:
                raise ValueError(f"piece key must be a non-empty string, got {kind!r}")
            if not isinstance(spec, dict):
                raise ValueError(f"piece spec for {kind!r} must be a mapping, got {type(spec)!r}")

            shape_node = spec.get("shape")
            if not isinstance(shape_node, (list, tuple)):
                raise ValueError(f"{kind!r}: 'shape' must be a list of strings, got {type(shape_node)!r}")
            shape = _parse_shape(shape_node)

            if expected_cells is not None and int(shape.sum()) != int(expected_cells):
                raise ValueError(f"{kind!r}: expected {expected_cells} filled cells, got {int(shape.sum())}")

            hue = _parse_hue(spec.get("hue"), kind=kind)

            pieces[kind] = PieceDef(kind=kind, shape=shape, hue=hue)
            kind_order.append(kind)

        return cls(pieces=pieces, kind_order=tuple(kind_order))

    def kinds(self) -> Tuple[str, ...]:
        return self.kind_order

    def __len__(self) -> int:
        return len(self.kind_order)

    def get(self, kind: str) -> PieceDef:
        try:
            return self.pieces[kind]
        except KeyError as e:
            raise KeyError(f"unknown piece kind {kind!r}. known kinds={list(self.kind_order)!r}") from e

    def shape(self, kind: str) -> np.ndarray:
        return self.get(kind).shape

    def rotations(self, kind: str) -> Tuple[np.ndarray, ...]:
        return self.get(kind).rotations()

    def hue_of(self, kind: str) -> float:
        return self.get(kind).hue

    def kind_idx(self, kind: str) -> int:
        try:
            idx = self.kind_order.index(kind)
        except ValueError as e:
            raise KeyError(f"unknown piece kind {kind!r}") from e
        return int(idx)

    def board_id(self, kind: str) -> int:
        return int(self.kind_idx(kind) + 1)

    def max_bbox_size(self) -> tuple[int, int]:
        """
        Return (max_bbox_w, max_bbox_h) over all kinds and their rotation states.
        """
        mw, mh = 0, 0
        for kind in self.kinds():
            for m in self.rotations(kind):
                h, w = m.shape
                mw = max(mw, int(w))
                mh = max(mh, int(h))
        return int(mw), int(mh)


__all__ = ["PieceDef", "PieceSet", "rotate_shape"]
