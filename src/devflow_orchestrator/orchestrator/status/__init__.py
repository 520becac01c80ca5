"""Deployment-status reconciliation and the signal sources feeding it."""

from .reconciler import DeploymentStatus, Reachability, ReconciliationSignals, reconcile
from .report import StatusReport, render_status_report

__all__ = [
    "DeploymentStatus",
    "Reachability",
    "ReconciliationSignals",
    "StatusReport",
    "reconcile",
    "render_status_report",
]
