"""Interactive operator mode.

A plain read-evaluate loop: one line of input is read, the matching pipeline or
workflow runs to completion, then the next line is read.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TextIO

from .status.report import StatusReport, render_status_report
from .workflow.engine import Engine
from .workflow.model import PipelineKey
from .workflow.registry import ALIASES, UnknownKeyError, resolve_key

logger = logging.getLogger(__name__)

EXIT_WORDS = frozenset({"x", "exit", "quit"})
HELP_WORDS = frozenset({"h", "help"})
STATUS_WORDS = frozenset({"status"})

MAX_STATUS_LINES = 10


class InteractiveSession:
    def __init__(
        self,
        *,
        engine: Engine,
        stdin: TextIO,
        stdout: TextIO,
        working_tree: Callable[[], list[str] | None] | None = None,
        status_report: Callable[[], StatusReport] | None = None,
    ) -> None:
        self._engine = engine
        self._stdin = stdin
        self._stdout = stdout
        self._working_tree = working_tree
        self._status_report = status_report

    def _print(self, text: str = "") -> None:
        print(text, file=self._stdout)

    def show_menu(self) -> None:
        registry = self._engine.registry
        self._print("Available pipelines:")
        for key, pipeline in registry.pipelines.items():
            self._print(f"  {key.value:<10} {pipeline.name}: {pipeline.description}")
        self._print("Available workflows:")
        for wkey, workflow in registry.workflows.items():
            self._print(f"  {wkey.value:<10} {workflow.name}: {workflow.description}")
        shortcuts = ", ".join(f"{alias}={target}" for alias, target in ALIASES.items())
        self._print(f"Shortcuts: {shortcuts}")
        self._print("Other: status, h (help), x (exit)")

    def show_working_tree(self) -> None:
        if self._working_tree is None:
            return
        lines = self._working_tree()
        if lines is None:
            self._print("Not a git repository or git not available")
            return
        if not lines:
            self._print("Working directory is clean")
            return
        self._print("Git status:")
        for line in lines[:MAX_STATUS_LINES]:
            self._print(f"  {line}")
        if len(lines) > MAX_STATUS_LINES:
            self._print(f"  ... and {len(lines) - MAX_STATUS_LINES} more files")

    def handle(self, raw: str) -> bool:
        """Evaluate one line of input. Returns False when the session should end."""

        choice = raw.strip().lower()
        if not choice:
            return True
        if choice in EXIT_WORDS:
            return False
        if choice in HELP_WORDS:
            self.show_menu()
            self.show_working_tree()
            return True
        if choice in STATUS_WORDS:
            if self._status_report is None:
                self._print("Deployment status is not available")
            else:
                for line in render_status_report(self._status_report()):
                    self._print(line)
            return True

        try:
            key = resolve_key(choice)
        except UnknownKeyError:
            logger.warning("Invalid option", extra={"input": choice})
            self._print('Invalid option. Type "h" for help or "x" to exit.')
            return True

        if isinstance(key, PipelineKey):
            ok = self._engine.run_pipeline(key)
        else:
            ok = self._engine.run_workflow(key)
        self._print(f"{key.value}: {'passed' if ok else 'failed'}")
        return True

    def run(self) -> int:
        self.show_menu()
        self.show_working_tree()
        while True:
            self._stdout.write("\nSelect option: ")
            self._stdout.flush()
            line = self._stdin.readline()
            if not line:
                break
            if not self.handle(line):
                break
        self._print("Session ended.")
        return 0
