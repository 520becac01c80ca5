from __future__ import annotations

import logging
from collections.abc import Sequence

import requests
from github import GithubException

from devflow_orchestrator.orchestrator.config import OrchestratorSettings
from devflow_orchestrator.orchestrator.github.client import GitHubClient

from .reconciler import DeploymentStatus, ReconciliationSignals
from .report import StatusReport
from .signals import GitRevisionSource, ReachabilityProbe, collect_status

logger = logging.getLogger(__name__)

# Labels under which a deploy is considered on track.
VERIFIED_STATUSES: frozenset[DeploymentStatus] = frozenset(
    {
        DeploymentStatus.HEALTHY,
        DeploymentStatus.SYNCED,
        DeploymentStatus.UPDATING,
        DeploymentStatus.DEPLOYING,
    }
)


class DeploymentStatusService:
    """Collect signals on demand and reconcile them into a status label.

    The GitHub connection is opened on first use so that runs which never ask
    for deployment status stay offline.
    """

    def __init__(
        self,
        *,
        revisions: GitRevisionSource,
        environments: Sequence[str],
        remote: GitHubClient | None = None,
        probe: ReachabilityProbe | None = None,
        settings: OrchestratorSettings | None = None,
    ) -> None:
        self._revisions = revisions
        self._environments = tuple(environments)
        self._remote = remote
        self._probe = probe
        self._settings = settings
        self._connect_attempted = remote is not None

    @classmethod
    def from_settings(cls, settings: OrchestratorSettings) -> DeploymentStatusService:
        probe = None
        if settings.probe_enabled:
            probe = ReachabilityProbe(
                settings.site_url, timeout_seconds=settings.probe_timeout_seconds
            )
        return cls(
            revisions=GitRevisionSource(settings.project_root),
            environments=settings.deployment_environments,
            probe=probe,
            settings=settings,
        )

    @property
    def revisions(self) -> GitRevisionSource:
        return self._revisions

    def _get_remote(self) -> GitHubClient | None:
        if self._connect_attempted:
            return self._remote
        self._connect_attempted = True

        settings = self._settings
        if settings is None or not settings.remote_status_enabled:
            logger.info("Remote deployment status disabled (no token or repository configured)")
            return None
        try:
            self._remote = GitHubClient(
                token=settings.github_token,
                repository=settings.github_repository,
                base_url=settings.github_base_url,
            )
        except (GithubException, requests.RequestException) as e:
            logger.warning("Could not connect to GitHub", extra={"error": str(e)})
            self._remote = None
        return self._remote

    def report(self) -> StatusReport:
        report = collect_status(
            revisions=self._revisions,
            remote=self._get_remote(),
            probe=self._probe,
            environments=self._environments,
        )
        status = report.status
        logger.info(f"Deployment status: {status.value}", extra={"status": status.value})
        return report

    def signals(self) -> ReconciliationSignals:
        return self.report().signals

    def check(self) -> DeploymentStatus:
        return self.report().status

    def close(self) -> None:
        if self._remote is not None:
            self._remote.close()
        if self._probe is not None:
            self._probe.close()
