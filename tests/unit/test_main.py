"""Unit tests for the CLI entrypoint."""

from __future__ import annotations

from pathlib import Path

import pytest

from devflow_orchestrator.orchestrator import main as main_module
from devflow_orchestrator.orchestrator.main import (
    EXIT_FAILED,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_USAGE,
    main,
)
from devflow_orchestrator.orchestrator.status.reconciler import (
    DeploymentStatus,
    Reachability,
    ReconciliationSignals,
)
from devflow_orchestrator.orchestrator.status.report import StatusReport

SHA = "0123456789abcdef0123456789abcdef01234567"
OTHER_SHA = "fedcba9876543210fedcba9876543210fedcba98"

UP = Reachability(reachable=True, http_status=200, latency_ms=35, size_bytes=2048)
DOWN = Reachability(reachable=False, http_status=502)

SIGNALS_BY_STATUS = {
    DeploymentStatus.HEALTHY: ReconciliationSignals(
        current_revision=SHA, latest_remote_deployed_revision=SHA, reachability=UP
    ),
    DeploymentStatus.DEPLOYING: ReconciliationSignals(
        current_revision=SHA, has_active_remote_jobs=True
    ),
    DeploymentStatus.PENDING_UNKNOWN: ReconciliationSignals(
        current_revision=SHA, latest_remote_deployed_revision=OTHER_SHA
    ),
    DeploymentStatus.INACCESSIBLE: ReconciliationSignals(
        current_revision=SHA, latest_remote_deployed_revision=SHA, reachability=DOWN
    ),
    DeploymentStatus.LOCAL_AHEAD: ReconciliationSignals(
        current_revision=SHA, has_unpushed_local_changes=True
    ),
    DeploymentStatus.UNKNOWN: ReconciliationSignals(current_revision=None),
}


class FakeStatusService:
    def __init__(self, report: StatusReport) -> None:
        self._report = report
        self.closed = False
        self.revisions = None

    def report(self) -> StatusReport:
        return self._report

    def check(self) -> DeploymentStatus:
        return self._report.status

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def cli(monkeypatch: pytest.MonkeyPatch, clean_env: Path, executor):
    """Run `main` against a recording executor and without touching logging."""

    monkeypatch.setattr(main_module, "configure_logging", lambda level, fmt="text": None)
    monkeypatch.setattr(main_module, "ShellCommandExecutor", lambda *, cwd: executor)
    return executor


def _fake_service(monkeypatch: pytest.MonkeyPatch, status: DeploymentStatus) -> FakeStatusService:
    report = StatusReport(signals=SIGNALS_BY_STATUS[status])
    assert report.status == status
    service = FakeStatusService(report)
    monkeypatch.setattr(
        main_module.DeploymentStatusService, "from_settings", classmethod(lambda cls, s: service)
    )
    return service


def test_list(cli, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list"]) == EXIT_OK

    out = capsys.readouterr().out
    assert "quality" in out
    assert "full" in out
    assert "q=quality" in out
    assert cli.calls == []


def test_unknown_target_fails(cli, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["deploy"]) == EXIT_FAILED

    captured = capsys.readouterr()
    assert "deploy" in captured.err
    assert "Pipelines:" in captured.out


def test_pipeline_by_alias(cli, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["q"]) == EXIT_OK

    assert cli.calls == [
        "npm run lint",
        "npm run type-check",
        "npm test",
        "npm run format:check",
    ]
    assert "Pipeline quality passed" in capsys.readouterr().out


def test_failing_pipeline_exits_non_zero(cli) -> None:
    cli.failing.add("npm run lint")

    assert main(["quality"]) == EXIT_FAILED
    assert cli.calls == ["npm run lint"]


def test_workflow_report(cli, capsys: pytest.CaptureFixture[str]) -> None:
    cli.failing.add("git push")

    assert main(["commit"]) == EXIT_FAILED

    out = capsys.readouterr().out
    assert "Workflow commit failed" in out
    assert "(aborted)" in out
    assert "[FAILED] Push to remote" in out


def test_interactive_refused_in_ci(cli, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CI", "true")

    assert main([]) == EXIT_USAGE
    assert main(["interactive", "--ci-mode"]) == EXIT_USAGE


def test_invalid_configuration_is_usage_error(cli, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEVFLOW_GITHUB_REPOSITORY", "nope")

    assert main(["--list"]) == EXIT_USAGE


def test_status_prints_label(
    cli, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    service = _fake_service(monkeypatch, DeploymentStatus.PENDING_UNKNOWN)

    assert main(["status"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "pending_unknown"
    assert service.closed is True


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (DeploymentStatus.HEALTHY, EXIT_OK),
        (DeploymentStatus.DEPLOYING, EXIT_OK),
        (DeploymentStatus.INACCESSIBLE, EXIT_FAILED),
        (DeploymentStatus.LOCAL_AHEAD, EXIT_FAILED),
        (DeploymentStatus.UNKNOWN, EXIT_FAILED),
    ],
)
def test_verify_exit_code(
    cli, monkeypatch: pytest.MonkeyPatch, status: DeploymentStatus, expected: int
) -> None:
    _fake_service(monkeypatch, status)

    assert main(["verify"]) == expected


def test_interrupt_exits_130(cli, monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(self, key):
        raise KeyboardInterrupt

    monkeypatch.setattr(main_module.Engine, "execute_pipeline", interrupted)

    assert main(["build"]) == EXIT_INTERRUPTED


def test_verbose_status_explains_label(
    cli, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _fake_service(monkeypatch, DeploymentStatus.HEALTHY)

    assert main(["status", "--verbose"]) == EXIT_OK

    out = capsys.readouterr().out
    assert out.splitlines()[0] == "Deployment status: healthy"
    assert f"Local revision:    {SHA[:8]}" in out
    assert "reachable (HTTP 200, 35ms, 2.0KB)" in out


def test_invalid_log_level_is_usage_error(
    cli, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    assert main(["--list"]) == EXIT_USAGE
    assert "LOG_LEVEL" in capsys.readouterr().err
