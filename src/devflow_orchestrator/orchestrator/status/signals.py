"""Gather the inputs for deployment-status reconciliation.

Each source answers one question (local git state, remote deployment state,
site reachability). Sources degrade instead of raising, so that a missing
signal produces an `unknown` label rather than a crash.
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Sequence
from pathlib import Path

import requests
from github import GithubException

from devflow_orchestrator.orchestrator.github.client import (
    DeploymentInfo,
    GitHubClient,
    WorkflowRunSummary,
)

from .reconciler import Reachability, ReconciliationSignals
from .report import StatusReport

logger = logging.getLogger(__name__)


class GitRevisionSource:
    """Read revision state from the local git checkout."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def _git(self, *args: str) -> str | None:
        try:
            completed = subprocess.run(
                ["git", *args],
                cwd=self._root,
                capture_output=True,
                text=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            logger.debug("git query failed", extra={"args": list(args), "error": str(e)})
            return None
        return completed.stdout.strip()

    def current_revision(self) -> str | None:
        return self._git("rev-parse", "HEAD") or None

    def upstream_revision(self) -> str | None:
        return self._git("rev-parse", "@{u}") or None

    def has_unpushed_changes(self) -> bool:
        return bool(self._git("log", "@{u}..HEAD", "--oneline"))

    def porcelain_status(self) -> list[str] | None:
        """Working-tree changes, or None when this is not a git checkout."""

        out = self._git("status", "--porcelain")
        if out is None:
            return None
        return [line for line in out.splitlines() if line.strip()]


class ReachabilityProbe:
    """Fetch a fixed URL once and report status, latency and payload size."""

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self._url

    def probe(self) -> Reachability:
        start = time.monotonic()
        try:
            resp = self._session.get(self._url, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning("Site not reachable", extra={"url": self._url, "error": str(e)})
            return Reachability(reachable=False)

        latency_ms = round((time.monotonic() - start) * 1000)
        result = Reachability(
            reachable=resp.status_code == 200,
            http_status=resp.status_code,
            latency_ms=latency_ms,
            size_bytes=len(resp.content),
        )
        logger.info(
            "Site probed",
            extra={
                "url": self._url,
                "http_status": result.http_status,
                "latency_ms": result.latency_ms,
                "size_bytes": result.size_bytes,
            },
        )
        return result

    def close(self) -> None:
        self._session.close()


def collect_status(
    *,
    revisions: GitRevisionSource,
    remote: GitHubClient | None,
    probe: ReachabilityProbe | None,
    environments: Sequence[str],
) -> StatusReport:
    """Query every source once and bundle the answers.

    A missing `remote` or a failing remote query marks the remote signals as
    unavailable; a missing `probe` leaves reachability unset.
    """

    deployment: DeploymentInfo | None = None
    active_runs: tuple[WorkflowRunSummary, ...] = ()
    remote_unavailable = remote is None

    if remote is not None:
        try:
            deployment = remote.get_latest_deployment(environments=environments)
            active_runs = tuple(remote.list_active_workflow_runs())
        except (GithubException, requests.RequestException) as e:
            logger.warning("Remote deployment status unavailable", extra={"error": str(e)})
            remote_unavailable = True
            deployment = None
            active_runs = ()

    signals = ReconciliationSignals(
        current_revision=revisions.current_revision(),
        latest_pushed_revision=revisions.upstream_revision(),
        latest_remote_deployed_revision=deployment.sha if deployment is not None else None,
        has_unpushed_local_changes=revisions.has_unpushed_changes(),
        has_active_remote_jobs=bool(active_runs),
        reachability=probe.probe() if probe is not None else None,
        remote_unavailable=remote_unavailable,
    )
    logger.debug(
        "Collected reconciliation signals",
        extra={
            "current_revision": signals.current_revision,
            "deployed_revision": signals.latest_remote_deployed_revision,
            "unpushed": signals.has_unpushed_local_changes,
            "active_jobs": len(active_runs),
            "remote_unavailable": signals.remote_unavailable,
        },
    )
    return StatusReport(signals=signals, deployment=deployment, active_runs=active_runs)


def collect_signals(
    *,
    revisions: GitRevisionSource,
    remote: GitHubClient | None,
    probe: ReachabilityProbe | None,
    environments: Sequence[str],
) -> ReconciliationSignals:
    return collect_status(
        revisions=revisions, remote=remote, probe=probe, environments=environments
    ).signals
