"""Wires the lifecycle components together from settings.

LifecycleService is what the HTTP layer talks to: the full deployment plus
the single-organization operations that remote coordinators call during a
deployment. Every call builds its own DeploymentContext; the service itself
holds only read-only collaborators and is shared between requests.
"""

import logging
from typing import Optional

from lifecycle.config import LifecycleSettings
from lifecycle.discovery.directory import NodeDirectory
from lifecycle.executor.command_runner import CommandRunner
from lifecycle.orchestrator.deploy import DeployWorkflow
from lifecycle.remote.delegate import RemoteDelegate
from lifecycle.schemas import DeployResult, DeploymentContext
from lifecycle.steps.approve import ApproveStep
from lifecycle.steps.commit import CommitStep
from lifecycle.steps.install import InstallStep
from lifecycle.steps.installed import InstalledQuery
from lifecycle.steps.sequence import SequenceNegotiator

logger = logging.getLogger(__name__)


class LifecycleService:
    """Entry points for the lifecycle operations of the local organization."""

    def __init__(
        self,
        settings: LifecycleSettings,
        runner: Optional[CommandRunner] = None,
        delegate: Optional[RemoteDelegate] = None,
    ):
        self.settings = settings
        self.runner = runner or CommandRunner(timeout=settings.command_timeout)
        self.delegate = delegate or RemoteDelegate(settings)

        self.directory = NodeDirectory(settings, self.runner)
        self.install_step = InstallStep(settings, self.runner)
        self.sequence_negotiator = SequenceNegotiator(settings, self.runner)
        self.approve_step = ApproveStep(settings, self.runner)
        self.commit_step = CommitStep(settings, self.runner)
        self.installed_query = InstalledQuery(settings, self.runner)

        self.workflow = DeployWorkflow(
            settings,
            directory=self.directory,
            install=self.install_step,
            sequence=self.sequence_negotiator,
            approve=self.approve_step,
            commit=self.commit_step,
            delegate=self.delegate,
        )

    def _context(self, chaincode: str, channel: str = "", **kwargs) -> DeploymentContext:
        return DeploymentContext(
            msp_id=self.settings.msp_id,
            channel=channel,
            chaincode=chaincode,
            **kwargs,
        )

    def deploy(self, channel: str, chaincode: str) -> DeployResult:
        """Run the full deployment across all channel members."""
        return self.workflow.run(channel, chaincode)

    def install(self, chaincode: str) -> str:
        """Install on the local peer only. Returns the package id ('' if unknown)."""
        ctx = self._context(chaincode)
        ccid = self.install_step.run(ctx)
        logger.info(f"Successfully installed {chaincode} with ccid {ccid}")
        return ccid

    def approve(self, channel: str, chaincode: str, sequence: int, ccid: str) -> bool:
        """Approve for the local organization. False if it was already approved."""
        ctx = self._context(chaincode, channel, sequence=sequence, ccid=ccid)
        submitted = self.approve_step.run(ctx)
        logger.info(f"Successfully approved {chaincode} with ccid {ccid}[{sequence}] on {channel}")
        return submitted

    def installed(self, channel: str, chaincode: str) -> Optional[str]:
        """Package id of `chaincode` installed for `channel`, or None."""
        ccid = self.installed_query.run(self._context(chaincode, channel))
        if ccid is None:
            logger.warning(f"CCID for {chaincode} could not be found on {channel}")
        else:
            logger.info(f"Found package id: {ccid} on {channel} for {chaincode}")
        return ccid

    def close(self) -> None:
        self.delegate.close()
