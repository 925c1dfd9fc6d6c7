# src/tetris_flow/config/io.py
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from tetris_flow.config.schema_types import require_mapping_strict
from tetris_flow.config.simulation import SimulationConfig


def load_yaml(path: Path) -> dict[str, Any]:
    """
    Load a YAML file into a dict[str, Any].

    Contract:
      - top-level MUST be a mapping
      - no schema validation here (pure I/O)
    """
    cfg_path = Path(path)
    with cfg_path.open("r", encoding="utf-8") as f:
        obj = yaml.safe_load(f)
    return require_mapping_strict(obj, where=f"config({path})")


def load_simulation_config(path: Path) -> SimulationConfig:
    """
    Accepts either the fields at top-level or nested under a `simulation:` key
    (then nothing else may sit beside it).
    """
    data = load_yaml(path)
    if "simulation" in data:
        data = require_mapping_strict(data, where=f"config({path})", allowed_keys=("simulation",))
        data = require_mapping_strict(data["simulation"], where=f"config({path}).simulation")
    return SimulationConfig.model_validate(data)


__all__ = ["load_yaml", "load_simulation_config"]
