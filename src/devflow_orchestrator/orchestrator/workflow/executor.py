from __future__ import annotations

import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Protocol

from .model import ExecutionResult

logger = logging.getLogger(__name__)


class CommandExecutor(Protocol):
    """Runs one external action to completion and reports success and duration.

    Implementations must never raise for a failing action.
    """

    def execute(
        self, action: str, description: str, *, silent: bool = False
    ) -> ExecutionResult: ...


class ShellCommandExecutor:
    """Run actions through the shell inside the project root.

    Output streams live to the operator unless `silent` is set, in which case
    it is discarded.
    """

    def __init__(self, *, cwd: Path, env: dict[str, str] | None = None) -> None:
        self._cwd = cwd
        self._env = {**os.environ, "FORCE_COLOR": "1", **(env or {})}

    def execute(self, action: str, description: str, *, silent: bool = False) -> ExecutionResult:
        logger.info(f"{description}...", extra={"action": action})
        output = subprocess.DEVNULL if silent else None

        start = time.monotonic()
        try:
            completed = subprocess.run(
                action,
                shell=True,
                cwd=self._cwd,
                env=self._env,
                stdout=output,
                stderr=output,
                check=False,
            )
            success = completed.returncode == 0
            returncode: int | None = completed.returncode
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Action could not be launched", extra={"action": action, "error": str(e)})
            success = False
            returncode = None
        elapsed = time.monotonic() - start

        extra = {
            "description": description,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": returncode,
        }
        if success:
            logger.info(f"{description} completed in {elapsed:.1f}s", extra=extra)
        else:
            logger.error(f"{description} failed after {elapsed:.1f}s", extra=extra)
        return ExecutionResult(success=success, elapsed=elapsed)
