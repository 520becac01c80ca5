"""CLI entrypoint for the developer-workflow orchestrator.

`devflow <target>` runs one pipeline or workflow; without a target an
interactive session is started.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from devflow_orchestrator import __version__
from devflow_orchestrator.orchestrator.config import OrchestratorSettings
from devflow_orchestrator.orchestrator.interactive import InteractiveSession
from devflow_orchestrator.orchestrator.logging import configure_logging
from devflow_orchestrator.orchestrator.status.report import render_status_report
from devflow_orchestrator.orchestrator.status.service import (
    VERIFIED_STATUSES,
    DeploymentStatusService,
)
from devflow_orchestrator.orchestrator.workflow.engine import Engine, WorkflowReport
from devflow_orchestrator.orchestrator.workflow.executor import ShellCommandExecutor
from devflow_orchestrator.orchestrator.workflow.model import PipelineKey
from devflow_orchestrator.orchestrator.workflow.registry import (
    ALIASES,
    ConfigurationError,
    Registry,
    UnknownKeyError,
    default_registry,
    resolve_key,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devflow",
        description="Run local validation/build/deploy pipelines and workflows",
    )
    parser.add_argument(
        "--version", action="version", version=f"devflow-orchestrator {__version__}"
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help=(
            "Pipeline or workflow key (or shortcut), or one of: status, verify, interactive. "
            "Omit to start interactive mode."
        ),
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available pipelines and workflows and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="With status or verify: explain the label (revisions, deployment, site probe)",
    )
    parser.add_argument(
        "--ci-mode",
        action="store_true",
        help="Non-interactive mode (also enabled by CI=true)",
    )
    return parser


def _print_listing(registry: Registry) -> None:
    print("Pipelines:")
    for key, pipeline in registry.pipelines.items():
        print(f"  {key.value:<10} {pipeline.name}: {pipeline.description}")
    print("Workflows:")
    for wkey, workflow in registry.workflows.items():
        print(f"  {wkey.value:<10} {workflow.name}: {workflow.description}")
    print("Shortcuts: " + ", ".join(f"{a}={t}" for a, t in ALIASES.items()))


def _print_workflow_report(report: WorkflowReport) -> None:
    outcome = "passed" if report.success else "failed"
    print(
        f"Workflow {report.key.value} {outcome} in {report.elapsed:.1f}s "
        f"({report.final_state.value})"
    )
    for step in report.steps:
        mark = "ok" if step.success else "FAILED"
        print(f"  [{mark}] {step.description} ({step.elapsed:.1f}s, {step.kind.value})")
    for warning in report.warnings:
        print(f"  warning: {warning}")
    if report.deployment_status is not None:
        print(f"Deployment status: {report.deployment_status.value}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = OrchestratorSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_USAGE

    configure_logging(settings.log_level, settings.log_format)
    ci_mode = args.ci_mode or settings.ci_mode
    if ci_mode:
        logger.info("Running in CI mode")

    status_service = DeploymentStatusService.from_settings(settings)
    try:
        registry = default_registry()
        engine = Engine(
            registry=registry,
            executor=ShellCommandExecutor(cwd=settings.project_root),
            status_check=status_service.check,
        )

        if args.list:
            _print_listing(registry)
            return EXIT_OK

        target = (args.target or "interactive").strip().lower()

        if target in {"interactive", "i"}:
            if ci_mode:
                print("Interactive mode is disabled in CI mode; pass a target", file=sys.stderr)
                return EXIT_USAGE
            session = InteractiveSession(
                engine=engine,
                stdin=sys.stdin,
                stdout=sys.stdout,
                working_tree=status_service.revisions.porcelain_status,
                status_report=status_service.report,
            )
            return session.run()

        if target in {"status", "verify"}:
            status_report = status_service.report()
            if args.verbose:
                for line in render_status_report(status_report):
                    print(line)
            else:
                print(status_report.status.value)
            if target == "verify" and status_report.status not in VERIFIED_STATUSES:
                return EXIT_FAILED
            return EXIT_OK

        try:
            key = resolve_key(target)
        except UnknownKeyError as e:
            print(str(e), file=sys.stderr)
            _print_listing(registry)
            return EXIT_FAILED

        if isinstance(key, PipelineKey):
            pipeline_report = engine.execute_pipeline(key)
            print(
                f"Pipeline {key.value} {'passed' if pipeline_report.success else 'failed'} "
                f"in {pipeline_report.elapsed:.1f}s"
            )
            return EXIT_OK if pipeline_report.success else EXIT_FAILED

        report = engine.execute_workflow(key)
        _print_workflow_report(report)
        return EXIT_OK if report.success else EXIT_FAILED

    except ConfigurationError as e:
        logger.error(str(e))
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    except KeyboardInterrupt:
        logger.warning("Interrupted; steps already completed are not rolled back")
        return EXIT_INTERRUPTED

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILED

    finally:
        status_service.close()


if __name__ == "__main__":
    raise SystemExit(main())
