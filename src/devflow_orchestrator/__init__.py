"""Developer workflow orchestrator.

Runs named pipelines (fail-fast command lists) and workflows (pipelines plus
direct commands, with fatal and monitoring steps) and reconciles local and
remote signals into a deployment-status label.
"""

__version__ = "0.1.0"

from devflow_orchestrator.orchestrator.config import OrchestratorSettings

__all__ = ["__version__", "OrchestratorSettings"]
