# src/tetris_flow/config/schema_types.py
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional


def require_mapping_strict(
    obj: Any,
    *,
    where: str,
    allowed_keys: Optional[Iterable[str]] = None,
) -> dict[str, Any]:
    """
    Required mapping:
      - None -> error
      - mapping -> materialized dict[str, Any]

    If allowed_keys is provided, reject unknown keys.
    """
    if obj is None:
        raise TypeError(f"{where} must be a mapping, got None")
    if not isinstance(obj, Mapping):
        raise TypeError(f"{where} must be a mapping, got {type(obj)!r}")

    out = {str(k): v for k, v in obj.items()}

    if allowed_keys is not None:
        allowed = set(allowed_keys)
        unknown = set(out.keys()) - allowed
        if unknown:
            raise KeyError(
                f"{where} contains unknown keys: {sorted(unknown)}; "
                f"allowed keys are: {sorted(allowed)}"
            )

    return out


def as_int(value: object, *, where: str) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{where} must be an int, got bool")
    if not isinstance(value, (int, float, str, bytes, bytearray)):
        raise TypeError(f"{where} must be an int-like value, got {type(value)!r}")
    try:
        return int(value)
    except ValueError as e:
        raise TypeError(f"{where} must be an int-like value, got {value!r}") from e


__all__ = ["require_mapping_strict", "as_int"]
