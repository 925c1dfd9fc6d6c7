# tests/test_piece_rules.py
from __future__ import annotations

from collections import Counter

import numpy as np
import pytest

from tetris_flow.game.core.piece_rules import BagPieceRule

KINDS = ("I", "J", "L", "O", "S", "T", "Z")


def _draw(rule: BagPieceRule, n: int) -> list[str]:
    return [rule.next_piece() for _ in range(n)]


def test_bag_holds_two_copies_of_every_kind() -> None:
    rule = BagPieceRule()
    rule.reset(rng=np.random.default_rng(0), kinds=KINDS)
    assert rule.remaining() == 2 * len(KINDS)

    for _ in range(3):
        counts = Counter(_draw(rule, 2 * len(KINDS)))
        assert counts == Counter({k: 2 for k in KINDS})


def test_every_kind_appears_within_first_2n_minus_1_draws() -> None:
    for seed in range(25):
        rule = BagPieceRule()
        rule.reset(rng=np.random.default_rng(seed), kinds=KINDS)
        seen = set(_draw(rule, 2 * len(KINDS) - 1))
        assert seen == set(KINDS), seed


def test_same_seed_gives_same_sequence() -> None:
    a = BagPieceRule()
    b = BagPieceRule()
    a.reset(rng=np.random.default_rng(123), kinds=KINDS)
    b.reset(rng=np.random.default_rng(123), kinds=KINDS)
    assert _draw(a, 50) == _draw(b, 50)


def test_reset_refills_a_partially_drawn_bag() -> None:
    rule = BagPieceRule()
    rule.reset(rng=np.random.default_rng(1), kinds=KINDS)
    _draw(rule, 5)
    rule.reset(rng=np.random.default_rng(1), kinds=KINDS)
    assert rule.remaining() == 14


def test_single_copy_bag_is_a_permutation() -> None:
    rule = BagPieceRule(bag_copies=1)
    rule.reset(rng=np.random.default_rng(7), kinds=KINDS)
    assert sorted(_draw(rule, 7)) == sorted(KINDS)


def test_next_piece_requires_reset() -> None:
    with pytest.raises(RuntimeError, match="reset"):
        BagPieceRule().next_piece()


def test_reset_rejects_empty_kinds() -> None:
    with pytest.raises(ValueError, match="non-empty kinds"):
        BagPieceRule().reset(rng=np.random.default_rng(0), kinds=())
