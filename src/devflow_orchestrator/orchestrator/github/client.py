"""GitHub API client wrapper for deployment status queries.

This wraps PyGithub (deployments) and a plain requests session (Actions runs) so
that remote-status calls stay out of CLI code and tests can inject fakes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import requests
from github import Auth, Github
from github.Repository import Repository

logger = logging.getLogger(__name__)

ACTIVE_RUN_STATUSES: tuple[str, ...] = ("in_progress", "queued")


@dataclass(frozen=True, slots=True)
class DeploymentInfo:
    """The newest deployment seen across the configured environments."""

    id: int
    sha: str
    environment: str
    created_at: datetime
    state: str | None


@dataclass(frozen=True, slots=True)
class WorkflowRunSummary:
    id: int
    name: str
    status: str
    head_sha: str
    html_url: str | None


class GitHubClient:
    """Small wrapper around PyGithub for the remote-status queries we need."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository:
            raise ValueError("GitHub repository is required")

        self._repository_name = repository
        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "devflow-orchestrator",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=base_url)
        self._repo = self._github.get_repo(repository)
        logger.debug("Connected to GitHub repository", extra={"repo": repository})

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _repo_url(self, *, path: str) -> str:
        path = path.lstrip("/")
        return f"{self._rest_base_url}/repos/{self._repository_name}/{path}"

    def get_latest_deployment(self, *, environments: Sequence[str]) -> DeploymentInfo | None:
        """Return the most recent deployment across `environments`, if any.

        GitHub lists deployments newest first, so only the head of each
        environment's list is inspected.
        """

        latest: DeploymentInfo | None = None
        for environment in environments:
            newest = next(iter(self._repo.get_deployments(environment=environment)), None)
            if newest is None:
                continue
            if latest is not None and newest.created_at <= latest.created_at:
                continue

            status = next(iter(newest.get_statuses()), None)
            latest = DeploymentInfo(
                id=newest.id,
                sha=newest.sha,
                environment=environment,
                created_at=newest.created_at,
                state=status.state if status is not None else None,
            )

        if latest is not None:
            logger.debug(
                "Latest deployment",
                extra={
                    "repo": self._repository_name,
                    "environment": latest.environment,
                    "sha": latest.sha,
                    "state": latest.state,
                },
            )
        return latest

    def list_active_workflow_runs(self) -> list[WorkflowRunSummary]:
        """Return Actions runs that are currently in progress or queued."""

        runs: list[WorkflowRunSummary] = []
        url = self._repo_url(path="actions/runs")
        for status in ACTIVE_RUN_STATUSES:
            resp = self._session.get(url, params={"status": status, "per_page": 100}, timeout=30)
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, dict):
                logger.warning(
                    "Unexpected workflow runs response",
                    extra={"repo": self._repository_name, "status_filter": status},
                )
                continue
            raw_runs = payload.get("workflow_runs")
            if not isinstance(raw_runs, list):
                continue
            runs.extend(
                run
                for run in (self._parse_run(item) for item in raw_runs if isinstance(item, dict))
                if run is not None
            )
        return runs

    @staticmethod
    def _parse_run(data: dict[str, Any]) -> WorkflowRunSummary | None:
        run_id = data.get("id")
        if not isinstance(run_id, int):
            return None
        name = data.get("name")
        status = data.get("status")
        head_sha = data.get("head_sha")
        html_url = data.get("html_url")
        return WorkflowRunSummary(
            id=run_id,
            name=name if isinstance(name, str) else "",
            status=status if isinstance(status, str) else "",
            head_sha=head_sha if isinstance(head_sha, str) else "",
            html_url=html_url if isinstance(html_url, str) else None,
        )

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
