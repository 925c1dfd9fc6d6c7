# src/tetris_flow/apps/run/entrypoint.py
from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from tqdm.auto import tqdm

from tetris_flow.config.io import load_simulation_config
from tetris_flow.config.simulation import SimulationConfig
from tetris_flow.runtime.board_text import render_board_text
from tetris_flow.runtime.simulation import Simulation
from tetris_flow.runtime.tempo import RateMeter
from tetris_flow.utils.logging import setup_logger

# Exit status for configuration errors (bad flags, bad YAML, failed validation).
EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Run the autopilot stacking simulation headless with a fixed frame time."
    )
    ap.add_argument("--config", type=str, default=None, help="YAML file with simulation settings")

    # --- loop ---
    ap.add_argument("--frames", type=int, default=6000, help="number of host frames to simulate")
    ap.add_argument("--fps", type=float, default=60.0, help="host frame rate; each frame advances 1/fps seconds")

    # --- overrides (take precedence over --config) ---
    ap.add_argument("--bpm", type=float, default=None)
    ap.add_argument("--rows", type=int, default=None)
    ap.add_argument("--cols", type=int, default=None)
    ap.add_argument("--min-lines", type=int, default=None, help="full rows required before any are cleared")
    ap.add_argument("--no-line-clear", action="store_true", help="never clear rows (stacking mode)")
    ap.add_argument("--seed", type=int, default=None)

    # --- output ---
    ap.add_argument("--show", action="store_true", help="print the final board")
    ap.add_argument("--no-progress", action="store_true")
    ap.add_argument("--log-level", type=str, default=None, choices=["debug", "info", "warning", "error"])
    return ap.parse_args(argv)


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if args.bpm is not None:
        out["bpm"] = float(args.bpm)
    if args.rows is not None:
        out["grid_rows"] = int(args.rows)
    if args.cols is not None:
        out["grid_cols"] = int(args.cols)
    if args.min_lines is not None:
        out["min_lines_to_clear"] = int(args.min_lines)
    if bool(args.no_line_clear):
        out["enable_line_clear"] = False
    if args.seed is not None:
        out["seed"] = int(args.seed)
    if args.log_level is not None:
        out["log_level"] = str(args.log_level)
    return out


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """
    Config file (if any) first, then CLI overrides; the merged mapping is validated once.
    """
    base = SimulationConfig() if args.config is None else load_simulation_config(Path(args.config))
    merged = {**base.model_dump(), **_overrides_from_args(args)}
    return SimulationConfig.model_validate(merged)


def run_simulation(args: argparse.Namespace) -> int:
    level = str(args.log_level or "info")
    logger = setup_logger(name="tetris_flow", use_rich=True, level=level)

    try:
        cfg = build_config(args)
        if int(args.frames) < 0:
            raise ValueError(f"--frames must be >= 0, got {args.frames}")
        if float(args.fps) <= 0.0:
            raise ValueError(f"--fps must be > 0, got {args.fps}")
    except (ValidationError, ValueError, TypeError, KeyError, OSError) as e:
        logger.error("[run] invalid configuration: %s", e)
        return EXIT_CONFIG_ERROR

    if args.log_level is None:
        logger = setup_logger(name="tetris_flow", use_rich=True, level=cfg.log_level)

    sim = Simulation.from_config(cfg)
    logger.info(
        "[run] grid=%dx%d min_lines=%d line_clear=%s tempo=%s seed=%s",
        cfg.grid_rows,
        cfg.grid_cols,
        cfg.min_lines_to_clear,
        cfg.enable_line_clear,
        sim.tempo.label(),
        cfg.seed,
    )

    frames = int(args.frames)
    dt = 1.0 / float(args.fps)
    meter = RateMeter(window=max(2, min(frames, 600)))

    use_bar = not bool(args.no_progress)
    pbar = tqdm(total=frames, unit="frame", dynamic_ncols=True) if use_bar else None

    # Throttle postfix updates; they dominate the loop cost otherwise.
    POSTFIX_EVERY = 250

    t0 = time.perf_counter()
    try:
        for i in range(frames):
            sim.tick(dt)
            meter.tick()

            if pbar is not None:
                pbar.update(1)
                if (i % POSTFIX_EVERY) == 0:
                    pbar.set_postfix(
                        pieces=str(sim.pieces_locked_all_games()),
                        lines=str(sim.lines_cleared_all_games()),
                        games=str(sim.games_played),
                    )
    finally:
        if pbar is not None:
            pbar.close()
    elapsed = time.perf_counter() - t0

    logger.info("[run] frames=%d simulated=%.1fs wall=%.3fs", frames, frames * dt, elapsed)
    logger.info("[run] pieces_locked=%d", sim.pieces_locked_all_games())
    logger.info("[run] lines_cleared=%d", sim.lines_cleared_all_games())
    logger.info("[run] games_played=%d", sim.games_played)
    logger.info("[run] frames/s=%.1f", meter.rate_hz())

    if bool(args.show):
        print(render_board_text(sim.snapshot()))

    return 0


__all__ = ["parse_args", "build_config", "run_simulation", "EXIT_CONFIG_ERROR"]
