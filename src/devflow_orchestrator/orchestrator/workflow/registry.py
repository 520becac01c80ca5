"""The immutable table of pipelines and workflows.

A `Registry` is constructed once at startup, validated eagerly, and handed to
the engine by reference. Lookups use the closed `PipelineKey`/`WorkflowKey`
key space; anything else is a configuration error.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .model import (
    DirectCommand,
    Pipeline,
    PipelineKey,
    PipelineRef,
    StepKind,
    Workflow,
    WorkflowKey,
    command_step,
    pipeline_step,
)
from .model import Command as Cmd


class ConfigurationError(ValueError):
    """A pipeline/workflow definition or lookup is invalid."""


class UnknownKeyError(ConfigurationError):
    pass


class DuplicateKeyError(ConfigurationError):
    pass


class InvalidDefinitionError(ConfigurationError):
    pass


ALIASES: dict[str, str] = {
    "q": PipelineKey.QUALITY.value,
    "s": PipelineKey.SECURITY.value,
    "b": PipelineKey.BUILD.value,
    "a": WorkflowKey.ALL.value,
    "c": WorkflowKey.COMMIT.value,
    "f": WorkflowKey.FIX.value,
    "t": WorkflowKey.TEST.value,
}


def resolve_key(value: str) -> PipelineKey | WorkflowKey:
    """Map operator input (key or short alias) onto the closed key space."""

    normalized = value.strip().lower()
    normalized = ALIASES.get(normalized, normalized)
    try:
        return PipelineKey(normalized)
    except ValueError:
        pass
    try:
        return WorkflowKey(normalized)
    except ValueError:
        raise UnknownKeyError(f"Unknown pipeline or workflow: {value!r}") from None


class Registry:
    def __init__(self, *, pipelines: Iterable[Pipeline], workflows: Iterable[Workflow]) -> None:
        pipeline_index: dict[PipelineKey, Pipeline] = {}
        for pipeline in pipelines:
            if pipeline.key in pipeline_index:
                raise DuplicateKeyError(f"Duplicate pipeline key: {pipeline.key.value!r}")
            pipeline_index[pipeline.key] = pipeline

        workflow_index: dict[WorkflowKey, Workflow] = {}
        for workflow in workflows:
            if workflow.key in workflow_index:
                raise DuplicateKeyError(f"Duplicate workflow key: {workflow.key.value!r}")
            workflow_index[workflow.key] = workflow

        self._pipelines: Mapping[PipelineKey, Pipeline] = MappingProxyType(pipeline_index)
        self._workflows: Mapping[WorkflowKey, Workflow] = MappingProxyType(workflow_index)
        self._validate()

    @property
    def pipelines(self) -> Mapping[PipelineKey, Pipeline]:
        return self._pipelines

    @property
    def workflows(self) -> Mapping[WorkflowKey, Workflow]:
        return self._workflows

    def pipeline(self, key: PipelineKey | str) -> Pipeline:
        try:
            return self._pipelines[PipelineKey(key)]
        except (KeyError, ValueError):
            raise UnknownKeyError(f"Unknown pipeline: {_label(key)!r}") from None

    def workflow(self, key: WorkflowKey | str) -> Workflow:
        try:
            return self._workflows[WorkflowKey(key)]
        except (KeyError, ValueError):
            raise UnknownKeyError(f"Unknown workflow: {_label(key)!r}") from None

    def _validate(self) -> None:
        for pipeline in self._pipelines.values():
            if not pipeline.commands:
                raise InvalidDefinitionError(f"Pipeline {pipeline.key.value!r} has no commands")

        for workflow in self._workflows.values():
            if not workflow.steps:
                raise InvalidDefinitionError(f"Workflow {workflow.key.value!r} has no steps")
            if sum(1 for step in workflow.steps if step.reconcile_after) > 1:
                raise InvalidDefinitionError(
                    f"Workflow {workflow.key.value!r} declares more than one reconciliation stage"
                )
            for step in workflow.steps:
                if isinstance(step.target, PipelineRef) and step.target.key not in self._pipelines:
                    raise InvalidDefinitionError(
                        f"Workflow {workflow.key.value!r} references undefined pipeline "
                        f"{step.target.key.value!r}"
                    )


def _label(key: object) -> str:
    return key.value if isinstance(key, PipelineKey | WorkflowKey) else str(key)


def default_registry() -> Registry:
    """The stock pipelines and workflows for a Node/GitHub Pages project."""

    pipelines = [
        Pipeline(
            key=PipelineKey.QUALITY,
            name="Quality",
            description="ESLint, TypeScript, tests, formatting",
            commands=(
                Cmd("ESLint check", "npm run lint"),
                Cmd("TypeScript check", "npm run type-check"),
                Cmd("Tests", "npm test"),
                Cmd("Format check", "npm run format:check"),
            ),
        ),
        Pipeline(
            key=PipelineKey.SECURITY,
            name="Security",
            description="Dependency audit and security patterns",
            commands=(
                Cmd("Dependency audit", "npm run security:audit"),
                Cmd("Security patterns", "npm run security:scan"),
            ),
        ),
        Pipeline(
            key=PipelineKey.BUILD,
            name="Build",
            description="Build application",
            commands=(Cmd("Build application", "npm run build"),),
        ),
    ]

    workflows = [
        Workflow(
            key=WorkflowKey.COMMIT,
            name="Quick Commit Flow",
            description="Quality check, smart commit and push",
            steps=(
                pipeline_step(PipelineKey.QUALITY),
                command_step("Smart commit", "node scripts/git/smart-commit.js --stage-all"),
                command_step("Push to remote", "git push"),
            ),
        ),
        Workflow(
            key=WorkflowKey.SAFE,
            name="Safe Development Flow",
            description="Full validation and smart commit",
            steps=(
                pipeline_step(PipelineKey.QUALITY),
                pipeline_step(PipelineKey.SECURITY),
                command_step("Smart commit", "node scripts/git/smart-commit.js"),
            ),
        ),
        Workflow(
            key=WorkflowKey.FULL,
            name="Full Pipeline",
            description="Quality, security, build, push and deployment verification",
            steps=(
                command_step(
                    "Pre-build commit",
                    "node scripts/git/smart-commit.js --stage-all --auto --allow-empty",
                ),
                pipeline_step(PipelineKey.QUALITY),
                pipeline_step(PipelineKey.SECURITY),
                pipeline_step(PipelineKey.BUILD),
                command_step(
                    "Post-build commit and push",
                    "node scripts/git/smart-commit.js --stage-all --push --auto --allow-empty",
                ),
                command_step(
                    "Monitor GitHub Actions",
                    "gh run watch --exit-status",
                    kind=StepKind.MONITORING,
                ),
                command_step(
                    "Final GitHub Actions status",
                    "gh run list --limit 5",
                    kind=StepKind.MONITORING,
                    reconcile_after=True,
                ),
                command_step("Validate deployment status", "devflow verify"),
            ),
        ),
        Workflow(
            key=WorkflowKey.FIX,
            name="Auto-fix Flow",
            description="Auto-fix lint and formatting, re-check quality, commit",
            steps=(
                command_step("Auto-fix linting", "npm run lint:fix"),
                command_step("Auto-format code", "npm run format"),
                pipeline_step(PipelineKey.QUALITY),
                command_step("Auto commit", "node scripts/git/smart-commit.js --stage-all --auto"),
            ),
        ),
        Workflow(
            key=WorkflowKey.ALL,
            name="All Pipelines",
            description="Quality, security and build in sequence",
            steps=(
                pipeline_step(PipelineKey.QUALITY),
                pipeline_step(PipelineKey.SECURITY),
                pipeline_step(PipelineKey.BUILD),
            ),
        ),
        Workflow(
            key=WorkflowKey.TEST,
            name="Tests",
            description="Run the test suite",
            steps=(command_step("Run tests", "npm test"),),
        ),
    ]

    return Registry(pipelines=pipelines, workflows=workflows)


def step_label(registry: Registry, target: PipelineRef | DirectCommand) -> str:
    if isinstance(target, PipelineRef):
        return registry.pipeline(target.key).name
    return target.command.description
