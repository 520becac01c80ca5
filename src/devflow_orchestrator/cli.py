"""Module entrypoint: `python -m devflow_orchestrator.cli`.

The CLI itself lives in `devflow_orchestrator.orchestrator.main`.
"""

from __future__ import annotations

from devflow_orchestrator.orchestrator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
