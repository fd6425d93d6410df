"""Deployment orchestration.

- deploy: the staged DeployWorkflow (discover, install, sequence, approve, commit)
- service: LifecycleService, which builds every component from settings
"""

from lifecycle.orchestrator.deploy import DeployWorkflow
from lifecycle.orchestrator.service import LifecycleService

__all__ = ["DeployWorkflow", "LifecycleService"]
