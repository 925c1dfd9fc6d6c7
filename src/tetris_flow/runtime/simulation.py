# src/tetris_flow/runtime/simulation.py
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from tetris_flow.agents.autopilot import Autopilot
from tetris_flow.config.simulation import SimulationConfig
from tetris_flow.game.core.board import Board
from tetris_flow.game.core.types import BoardSnapshot, MoveDecision
from tetris_flow.runtime.executor import ExecutorPhase, MoveExecutor
from tetris_flow.runtime.tempo import Tempo

LOG = logging.getLogger(__name__)


class Simulation:
    """
    Frame-driven controller: owns the board, autopilot, executor and tempo.

    The host (CLI loop, UI timer, test) calls tick(elapsed_s) once per frame. Everything
    else is a setting change that takes effect on the next tick. Settings that invalidate
    the board (reset, resize) also drop any in-flight move.
    """

    def __init__(
            self,
            board: Board,
            *,
            autopilot: Optional[Autopilot] = None,
            tempo: Optional[Tempo] = None,
    ) -> None:
        self._board = board
        self._autopilot = autopilot or Autopilot()
        self._tempo = tempo if tempo is not None else Tempo()
        self._tempo.clamp()
        self._executor = MoveExecutor(self._board, self._autopilot)

        # totals over finished games (the board's own counters restart every reset)
        self.total_lines_cleared = 0
        self.total_pieces_locked = 0

    @classmethod
    def from_config(cls, cfg: SimulationConfig) -> "Simulation":
        board = Board(
            int(cfg.grid_rows),
            int(cfg.grid_cols),
            int(cfg.min_lines_to_clear),
            enable_line_clear=bool(cfg.enable_line_clear),
            rng=np.random.default_rng(cfg.seed),
        )
        return cls(board, tempo=Tempo(bpm=float(cfg.bpm)))

    # ---- read side -----------------------------------------------------------------

    @property
    def board(self) -> Board:
        return self._board

    @property
    def tempo(self) -> Tempo:
        return self._tempo

    @property
    def executor(self) -> MoveExecutor:
        return self._executor

    @property
    def game_over(self) -> bool:
        return bool(self._board.game_over)

    @property
    def phase(self) -> ExecutorPhase:
        return self._executor.phase

    @property
    def decision(self) -> MoveDecision | None:
        return self._executor.decision

    @property
    def games_played(self) -> int:
        return int(self._board.games_played)

    def lines_cleared_all_games(self) -> int:
        return self.total_lines_cleared + int(self._board.lines_cleared)

    def pieces_locked_all_games(self) -> int:
        return self.total_pieces_locked + int(self._board.pieces_locked)

    def snapshot(self) -> BoardSnapshot:
        return self._board.snapshot()

    # ---- frame ---------------------------------------------------------------------

    def tick(self, elapsed_s: float, tempo_bpm: Optional[float] = None) -> None:
        """
        Advance by one host frame.

        A finished game is reset before anything else happens, so the executor never
        sees a board without an active piece on the frame after game over.
        """
        if tempo_bpm is not None:
            self.set_tempo(tempo_bpm)

        if self._board.game_over:
            LOG.info(
                "game over after %d piece(s), %d line(s); restarting",
                self._board.pieces_locked,
                self._board.lines_cleared,
            )
            self.reset()

        self._executor.update(float(elapsed_s), self._tempo)

    # ---- settings ------------------------------------------------------------------

    def reset(
            self,
            rows: Optional[int] = None,
            cols: Optional[int] = None,
            min_lines_to_clear: Optional[int] = None,
    ) -> None:
        lines = int(self._board.lines_cleared)
        pieces = int(self._board.pieces_locked)
        self._board.reset(rows=rows, cols=cols, min_lines_to_clear=min_lines_to_clear)

        # only a reset that went through ends the game
        self.total_lines_cleared += lines
        self.total_pieces_locked += pieces
        self._executor.cancel()

    def resize(self, rows: int, cols: int) -> None:
        LOG.debug("resize to %dx%d", rows, cols)
        self.reset(rows=rows, cols=cols)

    def set_min_lines_to_clear(self, n: int) -> None:
        self._board.min_lines_to_clear = n

    def set_line_clear_enabled(self, flag: bool) -> None:
        self._board.enable_line_clear = bool(flag)

    def set_tempo(self, bpm: float) -> None:
        self._tempo.bpm = float(bpm)
        self._tempo.clamp()


__all__ = ["Simulation"]
