# src/tetris_flow/cli/run.py
from __future__ import annotations

from tetris_flow.apps.run.entrypoint import parse_args, run_simulation


def main() -> int:
    return run_simulation(parse_args())


if __name__ == "__main__":
    raise SystemExit(main())
