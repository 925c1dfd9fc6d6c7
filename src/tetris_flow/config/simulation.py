# src/tetris_flow/config/simulation.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, ValidationInfo, field_validator

from tetris_flow.config.base import ConfigBase
from tetris_flow.config.schema_types import as_int

LogLevel = Literal["debug", "info", "warning", "error"]


class SimulationConfig(ConfigBase):
    """
    Initial configuration handed to the simulation core.

    Grid size, tempo and clear policy only; everything visual belongs to the renderer.
    """

    grid_rows: int = Field(default=20, ge=4)
    grid_cols: int = Field(default=10, ge=4)
    min_lines_to_clear: int = Field(default=1, ge=1)
    enable_line_clear: bool = True
    bpm: float = Field(default=300.0, gt=0.0)
    seed: Optional[int] = Field(default=None, ge=0)
    log_level: LogLevel = "info"

    @field_validator("grid_rows", "grid_cols", "min_lines_to_clear", mode="before")
    @classmethod
    def _int_fields(cls, v: object, info: ValidationInfo) -> int:
        return as_int(v, where=f"simulation.{info.field_name}")

    @field_validator("seed", mode="before")
    @classmethod
    def _seed_int(cls, v: object) -> Optional[int]:
        if v is None:
            return None
        return as_int(v, where="simulation.seed")

    @field_validator("log_level", mode="before")
    @classmethod
    def _log_level_lower(cls, v: object) -> str:
        return str(v).strip().lower()


__all__ = ["SimulationConfig", "LogLevel"]
