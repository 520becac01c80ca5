"""Human-readable explanation of a reconciled deployment status."""

from __future__ import annotations

from dataclasses import dataclass

from devflow_orchestrator.orchestrator.github.client import DeploymentInfo, WorkflowRunSummary

from .reconciler import DeploymentStatus, ReconciliationSignals, reconcile

SHORT_SHA_LENGTH = 8

_HINTS: dict[DeploymentStatus, str] = {
    DeploymentStatus.LOCAL_AHEAD: 'Local commits are not pushed; run "git push" to deploy them',
    DeploymentStatus.DEPLOYING: "Changes are being deployed by GitHub Actions",
    DeploymentStatus.PENDING_UNKNOWN: (
        "Latest changes are not deployed yet; check GitHub Actions for a queued or failed run"
    ),
    DeploymentStatus.SYNCED: "Latest changes are deployed",
    DeploymentStatus.HEALTHY: "Latest changes are deployed and live",
    DeploymentStatus.UPDATING: "Site is live; a newer deployment is running",
    DeploymentStatus.INACCESSIBLE: "Site is not accessible",
    DeploymentStatus.UNKNOWN: (
        "Could not determine deployment status; check GitHub Pages settings and Actions"
    ),
}


@dataclass(frozen=True, slots=True)
class StatusReport:
    """Reconciliation inputs together with the remote records they came from."""

    signals: ReconciliationSignals
    deployment: DeploymentInfo | None = None
    active_runs: tuple[WorkflowRunSummary, ...] = ()

    @property
    def status(self) -> DeploymentStatus:
        return reconcile(self.signals)


def _short(revision: str | None) -> str:
    return revision[:SHORT_SHA_LENGTH] if revision else "unknown"


def render_status_report(report: StatusReport) -> list[str]:
    signals = report.signals
    status = report.status
    lines = [
        f"Deployment status: {status.value}",
        f"  Local revision:    {_short(signals.current_revision)}",
        f"  Pushed revision:   {_short(signals.latest_pushed_revision)}",
    ]

    if signals.remote_unavailable:
        lines.append("  Deployed revision: unavailable")
    elif report.deployment is None:
        lines.append("  Deployed revision: no deployment found")
    else:
        deployment = report.deployment
        created = deployment.created_at.strftime("%Y-%m-%d %H:%M %Z").strip()
        lines.append(
            f"  Deployed revision: {_short(deployment.sha)} "
            f"({deployment.state or 'no status'}, {deployment.environment}, {created})"
        )

    if report.active_runs:
        names = ", ".join(run.name or f"run {run.id}" for run in report.active_runs)
        lines.append(f"  Active workflows:  {names}")

    probe = signals.reachability
    if probe is not None:
        details = [f"HTTP {probe.http_status}" if probe.http_status is not None else "no response"]
        if probe.latency_ms is not None:
            details.append(f"{probe.latency_ms}ms")
        if probe.size_bytes is not None:
            details.append(f"{probe.size_bytes / 1024:.1f}KB")
        state = "reachable" if probe.reachable else "not reachable"
        lines.append(f"  Site:              {state} ({', '.join(details)})")

    lines.append(_HINTS[status])
    return lines
