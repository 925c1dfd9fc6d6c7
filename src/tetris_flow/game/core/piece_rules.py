# src/tetris_flow/game/core/piece_rules.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from tetris_flow.game.core.constants import BAG_COPIES


class PieceRule(ABC):
    """
    Piece selection rule interface.

    Lifecycle:
      - reset(rng=..., kinds=...) is called on every board reset
      - next_piece() is called whenever the board needs to spawn

    Notes:
      - The RNG is owned by the board and injected.
      - Rules may be stateful (store rng/kinds) but should not create their own RNG streams.
    """

    @abstractmethod
    def reset(self, *, rng: np.random.Generator, kinds: Sequence[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def next_piece(self) -> str:
        raise NotImplementedError


@dataclass
class BagPieceRule(PieceRule):
    """
    K-bag randomizer.

    Parameters:
      - bag_copies: how many copies of each kind are placed into a bag before shuffling.
          * bag_copies=1 -> classic 7-bag.
          * bag_copies=2 -> 14-bag; no kind is absent for more than 2*K-1 consecutive draws
            counted from a fresh fill.

    Shuffling is Generator.shuffle (Fisher-Yates), deterministic w.r.t. the injected RNG.
    """

    bag_copies: int = BAG_COPIES

    _rng: np.random.Generator | None = None
    _kinds: tuple[str, ...] = ()
    _bag: list[str] = field(default_factory=list)

    def reset(self, *, rng: np.random.Generator, kinds: Sequence[str]) -> None:
        self._rng = rng
        self._kinds = tuple(str(k) for k in kinds)
        if not self._kinds:
            raise ValueError("BagPieceRule requires non-empty kinds")
        if int(self.bag_copies) <= 0:
            raise ValueError(f"BagPieceRule.bag_copies must be >= 1 (got {self.bag_copies})")
        self._bag = []
        self._refill()

    def _refill(self) -> None:
        if self._rng is None or not self._kinds:
            raise RuntimeError("BagPieceRule.reset() must be called before _refill()")
        self._bag = [k for k in self._kinds for _ in range(int(self.bag_copies))]
        self._rng.shuffle(self._bag)

    def remaining(self) -> int:
        return len(self._bag)

    def next_piece(self) -> str:
        if self._rng is None or not self._kinds:
            raise RuntimeError("BagPieceRule.reset() must be called before next_piece()")
        if not self._bag:
            self._refill()
        # Pop from end (cheaper than pop(0))
        return self._bag.pop()


__all__ = ["PieceRule", "BagPieceRule"]
