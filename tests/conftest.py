"""Test configuration and fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from devflow_orchestrator.orchestrator.workflow.model import ExecutionResult

_SETTINGS_ENV_VARS = (
    "LOG_LEVEL",
    "DEVFLOW_LOG_FORMAT",
    "DEVFLOW_PROJECT_ROOT",
    "DEVFLOW_GITHUB_TOKEN",
    "GITHUB_BASE_URL",
    "DEVFLOW_GITHUB_REPOSITORY",
    "DEVFLOW_DEPLOYMENT_ENVIRONMENTS",
    "DEVFLOW_SITE_URL",
    "DEVFLOW_PROBE_TIMEOUT_SECONDS",
    "DEVFLOW_CI_MODE",
    "CI",
)


@dataclass
class RecordingExecutor:
    """Executor fake: actions listed in `failing` fail, everything else succeeds."""

    failing: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def execute(self, action: str, description: str, *, silent: bool = False) -> ExecutionResult:
        self.calls.append(action)
        return ExecutionResult(success=action not in self.failing, elapsed=0.01)


@pytest.fixture
def executor() -> RecordingExecutor:
    """Provide an executor that records every action it is asked to run."""
    return RecordingExecutor()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Isolate settings from the developer's environment and `.env` file."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
