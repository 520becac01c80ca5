"""Configuration for the local developer-workflow orchestrator.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Remote deployment status and the reachability probe are optional: without a
token/repository or a site URL the corresponding signals are simply reported
as unknown.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPOSITORY_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


class OrchestratorSettings(BaseSettings):
    """Settings for the orchestrator CLI.

    Environment variables:
    - LOG_LEVEL                        (optional)
    - DEVFLOW_LOG_FORMAT               (optional, "text" or "json")
    - DEVFLOW_PROJECT_ROOT             (optional)
    - DEVFLOW_GITHUB_TOKEN             (optional)
    - GITHUB_BASE_URL                  (optional)
    - DEVFLOW_GITHUB_REPOSITORY        (optional, "owner/repo")
    - DEVFLOW_DEPLOYMENT_ENVIRONMENTS  (optional, JSON list)
    - DEVFLOW_SITE_URL                 (optional)
    - DEVFLOW_PROBE_TIMEOUT_SECONDS    (optional)
    - DEVFLOW_CI_MODE or CI            (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `OrchestratorSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        validation_alias="DEVFLOW_LOG_FORMAT",
        description="Console log format: human-readable text or one JSON object per line",
    )

    project_root: Path = Field(
        default=Path("."),
        validation_alias="DEVFLOW_PROJECT_ROOT",
        description="Working directory in which every action is run",
    )

    github_token: str = Field(
        default="",
        validation_alias="DEVFLOW_GITHUB_TOKEN",
        description="GitHub token used for deployment and Actions queries",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    github_repository: str = Field(
        default="",
        validation_alias="DEVFLOW_GITHUB_REPOSITORY",
        description="Repository whose deployments are reconciled, as 'owner/repo'",
    )
    deployment_environments: list[str] = Field(
        default_factory=lambda: ["production", "github-pages"],
        validation_alias="DEVFLOW_DEPLOYMENT_ENVIRONMENTS",
        description="Deployment environments searched for the latest deployed revision",
    )

    site_url: str = Field(
        default="",
        validation_alias="DEVFLOW_SITE_URL",
        description="Public URL probed for reachability after deploys",
    )
    probe_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        validation_alias="DEVFLOW_PROBE_TIMEOUT_SECONDS",
        description="Upper bound for the reachability probe",
    )

    ci_mode: bool = Field(
        default=False,
        validation_alias=AliasChoices("DEVFLOW_CI_MODE", "CI"),
        description="Non-interactive mode; interactive sessions are refused",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {value!r}")
        return level

    @model_validator(mode="after")
    def _check_repository(self) -> OrchestratorSettings:
        repo = self.github_repository.strip()
        if repo and not _REPOSITORY_RE.match(repo):
            raise ValueError("DEVFLOW_GITHUB_REPOSITORY must look like 'owner/repo'")
        self.github_repository = repo
        return self

    @property
    def remote_status_enabled(self) -> bool:
        """Whether the GitHub deployment/Actions queries can be made."""

        return bool(self.github_token.strip() and self.github_repository)

    @property
    def probe_enabled(self) -> bool:
        return bool(self.site_url.strip())
