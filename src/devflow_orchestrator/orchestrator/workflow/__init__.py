"""Pipeline and workflow execution.

Definitions (`model`, `registry`) are immutable; the `engine` walks them in
declaration order, delegating each action to a `CommandExecutor`.
"""

from .engine import Engine, PipelineReport, WorkflowReport
from .model import ExecutionResult, PipelineKey, StepKind, WorkflowKey
from .registry import Registry, default_registry

__all__ = [
    "Engine",
    "ExecutionResult",
    "PipelineKey",
    "PipelineReport",
    "Registry",
    "StepKind",
    "WorkflowKey",
    "WorkflowReport",
    "default_registry",
]
