# src/tetris_flow/game/core/constants.py
from __future__ import annotations

# Board / cell encoding
EMPTY_CELL: int = 0

# Classic tetromino set size
CLASSIC_NUM_PIECES: int = 7

# Rotation states searched per piece (quarter turns)
NUM_ROTATIONS: int = 4

# Off-board columns probed on each side during placement search
SEARCH_MARGIN: int = 2

# Copies of every kind placed into one bag
BAG_COPIES: int = 2
