# src/tetris_flow/config/__init__.py
from __future__ import annotations

from tetris_flow.config.base import ConfigBase
from tetris_flow.config.io import load_simulation_config, load_yaml
from tetris_flow.config.simulation import SimulationConfig

__all__ = [
    "ConfigBase",
    "SimulationConfig",
    "load_yaml",
    "load_simulation_config",
]
