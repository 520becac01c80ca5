"""Declarative building blocks for pipelines and workflows.

Everything here is frozen: definitions are built once at startup and then only
read by the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PipelineKey(str, Enum):
    QUALITY = "quality"
    SECURITY = "security"
    BUILD = "build"


class WorkflowKey(str, Enum):
    COMMIT = "commit"
    SAFE = "safe"
    FULL = "full"
    FIX = "fix"
    ALL = "all"
    TEST = "test"


class StepKind(str, Enum):
    """How a failing step affects the enclosing workflow."""

    FATAL = "fatal"
    MONITORING = "monitoring"


@dataclass(frozen=True, slots=True)
class Command:
    """A single opaque action, run as a shell command line."""

    description: str
    run: str
    silent: bool = False


@dataclass(frozen=True, slots=True)
class Pipeline:
    key: PipelineKey
    name: str
    description: str
    commands: tuple[Command, ...]


@dataclass(frozen=True, slots=True)
class PipelineRef:
    key: PipelineKey


@dataclass(frozen=True, slots=True)
class DirectCommand:
    command: Command


@dataclass(frozen=True, slots=True)
class WorkflowStep:
    """One unit of work inside a workflow.

    `reconcile_after` marks the step after which the engine queries the
    deployment status for the final report.
    """

    target: PipelineRef | DirectCommand
    kind: StepKind = StepKind.FATAL
    reconcile_after: bool = False

    @property
    def fatal(self) -> bool:
        return self.kind is StepKind.FATAL


@dataclass(frozen=True, slots=True)
class Workflow:
    key: WorkflowKey
    name: str
    description: str
    steps: tuple[WorkflowStep, ...]


def pipeline_step(key: PipelineKey) -> WorkflowStep:
    return WorkflowStep(target=PipelineRef(key))


def command_step(
    description: str,
    run: str,
    *,
    kind: StepKind = StepKind.FATAL,
    silent: bool = False,
    reconcile_after: bool = False,
) -> WorkflowStep:
    return WorkflowStep(
        target=DirectCommand(Command(description=description, run=run, silent=silent)),
        kind=kind,
        reconcile_after=reconcile_after,
    )


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    success: bool
    elapsed: float
