# src/tetris_flow/__init__.py
from __future__ import annotations

from tetris_flow.agents.autopilot import Autopilot, HeuristicWeights
from tetris_flow.game.core.board import Board
from tetris_flow.game.core.types import ActivePiece, BoardSnapshot, MoveDecision
from tetris_flow.runtime.executor import ExecutorPhase, MoveExecutor
from tetris_flow.runtime.simulation import Simulation

__all__ = [
    "Board",
    "ActivePiece",
    "BoardSnapshot",
    "MoveDecision",
    "Autopilot",
    "HeuristicWeights",
    "ExecutorPhase",
    "MoveExecutor",
    "Simulation",
]
