"""Unit tests for the GitHub client wrapper (mocked PyGithub and HTTP)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import Mock

import pytest
import requests

from devflow_orchestrator.orchestrator.github.client import GitHubClient


def _deployment(*, id: int, sha: str, created_at: datetime, state: str | None) -> Mock:
    deployment = Mock()
    deployment.id = id
    deployment.sha = sha
    deployment.created_at = created_at
    deployment.get_statuses.return_value = [] if state is None else [Mock(state=state)]
    return deployment


def _response(payload: Any) -> Mock:
    resp = Mock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def _session() -> Mock:
    session = Mock()
    session.headers = {}
    return session


def _client(*, repo: Mock | None = None, session: Mock | None = None) -> GitHubClient:
    return GitHubClient(
        token="test-token",
        repository="octo-org/site",
        repo=repo or Mock(),
        session=session or _session(),
    )


def test_client_requires_token_and_repository() -> None:
    with pytest.raises(ValueError):
        GitHubClient(token="", repository="octo-org/site", repo=Mock())
    with pytest.raises(ValueError):
        GitHubClient(token="t", repository="", repo=Mock())


def test_session_is_authenticated() -> None:
    session = _session()
    client = _client(session=session)

    assert client.repository == "octo-org/site"
    assert session.headers["Authorization"] == "Bearer test-token"
    assert session.headers["Accept"] == "application/vnd.github+json"


def test_latest_deployment_is_newest_across_environments() -> None:
    older = _deployment(
        id=1, sha="aaa111", created_at=datetime(2025, 1, 1, tzinfo=UTC), state="success"
    )
    newer = _deployment(
        id=2, sha="bbb222", created_at=datetime(2025, 2, 1, tzinfo=UTC), state="in_progress"
    )
    repo = Mock()
    repo.get_deployments.side_effect = lambda environment: {
        "production": [older],
        "github-pages": [newer],
    }[environment]

    info = _client(repo=repo).get_latest_deployment(environments=["production", "github-pages"])

    assert info is not None
    assert info.id == 2
    assert info.sha == "bbb222"
    assert info.environment == "github-pages"
    assert info.state == "in_progress"


def test_latest_deployment_none_when_no_records() -> None:
    repo = Mock()
    repo.get_deployments.return_value = []

    assert _client(repo=repo).get_latest_deployment(environments=["production"]) is None


def test_deployment_without_statuses_has_no_state() -> None:
    only = _deployment(
        id=3, sha="ccc333", created_at=datetime(2025, 3, 1, tzinfo=UTC), state=None
    )
    repo = Mock()
    repo.get_deployments.return_value = [only]

    info = _client(repo=repo).get_latest_deployment(environments=["production"])

    assert info is not None
    assert info.state is None


def test_list_active_workflow_runs_queries_in_progress_and_queued() -> None:
    session = _session()
    session.get.side_effect = [
        _response(
            {
                "workflow_runs": [
                    {
                        "id": 10,
                        "name": "Deploy",
                        "status": "in_progress",
                        "head_sha": "abc",
                        "html_url": "https://github.com/octo-org/site/actions/runs/10",
                    },
                    {"name": "missing id"},
                ]
            }
        ),
        _response({"workflow_runs": [{"id": 11, "status": "queued"}]}),
    ]

    runs = _client(session=session).list_active_workflow_runs()

    assert [r.id for r in runs] == [10, 11]
    assert runs[1].name == ""
    assert runs[1].html_url is None
    url = session.get.call_args_list[0].args[0]
    assert url == "https://api.github.com/repos/octo-org/site/actions/runs"
    statuses = [c.kwargs["params"]["status"] for c in session.get.call_args_list]
    assert statuses == ["in_progress", "queued"]


def test_list_active_workflow_runs_propagates_http_errors() -> None:
    session = _session()
    failing = _response({})
    failing.raise_for_status.side_effect = requests.HTTPError("401 Unauthorized")
    session.get.return_value = failing

    with pytest.raises(requests.HTTPError):
        _client(session=session).list_active_workflow_runs()


def test_non_object_runs_response_is_skipped() -> None:
    session = _session()
    session.get.side_effect = [
        _response([{"message": "gateway says hello"}]),
        _response({"workflow_runs": [{"id": 12, "name": "Deploy", "status": "queued"}]}),
    ]

    runs = _client(session=session).list_active_workflow_runs()

    assert [r.id for r in runs] == [12]
