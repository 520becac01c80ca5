"""Reduce local and remote deployment signals to one coarse status label.

Reconciliation happens in two independent stages:

1. Revision reconciliation compares the local revision with what the remote
   platform last deployed, taking unpushed work and running jobs into account.
2. Accessibility refinement folds in the HTTP probe, which models the lag
   between "pushed" and "visibly live".

Both stages are pure functions of `ReconciliationSignals`. Rules are evaluated
in order and the first match wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DeploymentStatus(str, Enum):
    LOCAL_AHEAD = "local_ahead"
    DEPLOYING = "deploying"
    PENDING_UNKNOWN = "pending_unknown"
    SYNCED = "synced"
    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    UPDATING = "updating"
    INACCESSIBLE = "inaccessible"


@dataclass(frozen=True, slots=True)
class Reachability:
    reachable: bool
    http_status: int | None = None
    latency_ms: int | None = None
    size_bytes: int | None = None


@dataclass(frozen=True, slots=True)
class ReconciliationSignals:
    current_revision: str | None
    latest_pushed_revision: str | None = None
    latest_remote_deployed_revision: str | None = None
    has_unpushed_local_changes: bool = False
    has_active_remote_jobs: bool = False
    reachability: Reachability | None = None

    # The remote-status query failed outright; remote fields are not observations.
    remote_unavailable: bool = False


def revisions_match(a: str | None, b: str | None) -> bool:
    """True when either revision is a prefix of the other.

    Tolerates abbreviated vs full identifiers. Empty or missing revisions never match.
    """

    if not a or not b:
        return False
    left, right = a.strip().lower(), b.strip().lower()
    if not left or not right:
        return False
    return left.startswith(right) or right.startswith(left)


def reconcile_revisions(signals: ReconciliationSignals) -> DeploymentStatus:
    if signals.has_unpushed_local_changes:
        return DeploymentStatus.LOCAL_AHEAD

    if signals.remote_unavailable or not signals.current_revision:
        return DeploymentStatus.UNKNOWN

    deployed = signals.latest_remote_deployed_revision
    if deployed:
        if not revisions_match(signals.current_revision, deployed):
            if signals.has_active_remote_jobs:
                return DeploymentStatus.DEPLOYING
            return DeploymentStatus.PENDING_UNKNOWN
        return DeploymentStatus.SYNCED

    if signals.has_active_remote_jobs:
        return DeploymentStatus.DEPLOYING
    return DeploymentStatus.UNKNOWN


def refine_with_reachability(
    status: DeploymentStatus, signals: ReconciliationSignals
) -> DeploymentStatus:
    probe = signals.reachability
    if probe is None or status is DeploymentStatus.LOCAL_AHEAD:
        return status

    if probe.reachable:
        if status is DeploymentStatus.SYNCED:
            if signals.has_active_remote_jobs:
                return DeploymentStatus.UPDATING
            return DeploymentStatus.HEALTHY
        return status

    if status is DeploymentStatus.DEPLOYING:
        return status
    return DeploymentStatus.INACCESSIBLE


def reconcile(signals: ReconciliationSignals) -> DeploymentStatus:
    return refine_with_reachability(reconcile_revisions(signals), signals)
