"""Orchestrator components.

- Settings loaded from .env
- Logging configuration
- Pipeline/workflow engine and its registry
- Deployment-status reconciliation
- The CLI and interactive session
"""
