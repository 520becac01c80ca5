"""Sequential execution of pipelines and workflows.

Steps run strictly one after another: later steps may depend on side effects
of earlier ones (a commit must exist before a push). Nothing is retried and
nothing is rolled back.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from devflow_orchestrator.orchestrator.status.reconciler import DeploymentStatus

from .executor import CommandExecutor
from .model import DirectCommand, PipelineKey, StepKind, WorkflowKey
from .registry import Registry, step_label
from .state_machine import RunSnapshot, RunState, transition

logger = logging.getLogger(__name__)

StatusCheck = Callable[[], DeploymentStatus]


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    description: str
    success: bool
    elapsed: float


@dataclass(frozen=True, slots=True)
class PipelineReport:
    key: PipelineKey
    success: bool
    elapsed: float
    outcomes: tuple[CommandOutcome, ...]


@dataclass(frozen=True, slots=True)
class StepOutcome:
    description: str
    kind: StepKind
    success: bool
    elapsed: float


@dataclass(frozen=True, slots=True)
class WorkflowReport:
    key: WorkflowKey
    success: bool
    elapsed: float
    final_state: RunState
    steps: tuple[StepOutcome, ...]
    warnings: tuple[str, ...] = ()
    deployment_status: DeploymentStatus | None = None


class Engine:
    """Run registry definitions through a `CommandExecutor`.

    Args:
        registry: The immutable pipeline/workflow table.
        executor: Runs individual actions.
        status_check: Optional callable queried for the terminal reconciliation
            stage of workflows that declare one.
    """

    def __init__(
        self,
        *,
        registry: Registry,
        executor: CommandExecutor,
        status_check: StatusCheck | None = None,
    ) -> None:
        self._registry = registry
        self._executor = executor
        self._status_check = status_check

    @property
    def registry(self) -> Registry:
        return self._registry

    def run_pipeline(self, key: PipelineKey | str) -> bool:
        return self.execute_pipeline(key).success

    def run_workflow(self, key: WorkflowKey | str) -> bool:
        return self.execute_workflow(key).success

    def execute_pipeline(self, key: PipelineKey | str) -> PipelineReport:
        pipeline = self._registry.pipeline(key)
        logger.info(f"Pipeline {pipeline.name}", extra={"pipeline": pipeline.key.value})

        start = time.monotonic()
        outcomes: list[CommandOutcome] = []
        success = True
        for command in pipeline.commands:
            result = self._executor.execute(
                command.run, command.description, silent=command.silent
            )
            outcomes.append(
                CommandOutcome(
                    description=command.description,
                    success=result.success,
                    elapsed=result.elapsed,
                )
            )
            if not result.success:
                success = False
                break
        elapsed = time.monotonic() - start

        extra = {
            "pipeline": pipeline.key.value,
            "elapsed_seconds": round(elapsed, 3),
            "commands_run": len(outcomes),
        }
        if success:
            logger.info(f"{pipeline.name} completed successfully in {elapsed:.1f}s", extra=extra)
        else:
            logger.error(f"{pipeline.name} failed after {elapsed:.1f}s", extra=extra)

        return PipelineReport(
            key=pipeline.key, success=success, elapsed=elapsed, outcomes=tuple(outcomes)
        )

    def execute_workflow(self, key: WorkflowKey | str) -> WorkflowReport:
        workflow = self._registry.workflow(key)
        logger.info(
            f"{workflow.name}: {workflow.description}", extra={"workflow": workflow.key.value}
        )

        start = time.monotonic()
        snapshot = RunSnapshot()
        steps: list[StepOutcome] = []
        warnings: list[str] = []
        deployment_status: DeploymentStatus | None = None

        for index, step in enumerate(workflow.steps):
            snapshot = transition(current=snapshot, to=RunState.RUNNING, step_index=index)
            description = step_label(self._registry, step.target)

            if isinstance(step.target, DirectCommand):
                command = step.target.command
                result = self._executor.execute(
                    command.run, command.description, silent=command.silent
                )
                ok, step_elapsed = result.success, result.elapsed
            else:
                report = self.execute_pipeline(step.target.key)
                ok, step_elapsed = report.success, report.elapsed

            steps.append(
                StepOutcome(
                    description=description, kind=step.kind, success=ok, elapsed=step_elapsed
                )
            )

            if ok:
                snapshot = transition(current=snapshot, to=RunState.STEP_SUCCEEDED)
            elif step.fatal:
                snapshot = transition(current=snapshot, to=RunState.STEP_FAILED_FATAL)
                snapshot = transition(current=snapshot, to=RunState.ABORTED)
                break
            else:
                snapshot = transition(current=snapshot, to=RunState.STEP_FAILED_NON_FATAL)
                message = f"{description} failed, but continuing"
                warnings.append(message)
                logger.warning(
                    message, extra={"workflow": workflow.key.value, "step_index": index}
                )

            if step.reconcile_after:
                deployment_status = self._query_status()

        if not snapshot.terminal:
            snapshot = transition(current=snapshot, to=RunState.COMPLETED)

        elapsed = time.monotonic() - start
        success = snapshot.state is RunState.COMPLETED

        extra: dict[str, object] = {
            "workflow": workflow.key.value,
            "elapsed_seconds": round(elapsed, 3),
            "final_state": snapshot.state.value,
        }
        if deployment_status is not None:
            extra["deployment_status"] = deployment_status.value
        if success:
            logger.info(f"{workflow.name} completed successfully in {elapsed:.1f}s", extra=extra)
        else:
            logger.error(f"{workflow.name} failed after {elapsed:.1f}s", extra=extra)

        return WorkflowReport(
            key=workflow.key,
            success=success,
            elapsed=elapsed,
            final_state=snapshot.state,
            steps=tuple(steps),
            warnings=tuple(warnings),
            deployment_status=deployment_status,
        )

    def _query_status(self) -> DeploymentStatus | None:
        if self._status_check is None:
            return None
        try:
            return self._status_check()
        except Exception:
            logger.warning("Deployment status check failed; reporting unknown", exc_info=True)
            return DeploymentStatus.UNKNOWN
