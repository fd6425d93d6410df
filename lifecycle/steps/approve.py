"""Approve step: the local organization's sign-off on a chaincode definition.

Approval is guarded by a commit-readiness check so a re-run of a deployment
that failed after some organizations approved does not submit the same
approval again. The guard is read-then-act, not a lock.
"""

import logging

from lifecycle.config import LifecycleSettings
from lifecycle.errors import StepExecutionError
from lifecycle.executor.command_runner import CommandRunner
from lifecycle.schemas import DeploymentContext
from lifecycle.steps.peer_cli import definition_args, lifecycle_command, orderer_args
from lifecycle.steps.schemas import CommitReadiness

logger = logging.getLogger(__name__)


class ApproveStep:
    """Approves a chaincode definition for the local organization."""

    def __init__(self, settings: LifecycleSettings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    def is_approved(self, ctx: DeploymentContext) -> bool:
        """Whether the local MSP already approved the definition at ctx.sequence."""
        args = lifecycle_command(self.settings, "checkcommitreadiness")
        args += definition_args(self.settings, ctx.channel, ctx.chaincode, ctx.sequence)
        args += orderer_args(self.settings)
        args += ["-O", "json"]

        readiness = self.runner.run(args).parse_json(CommitReadiness)
        return readiness.is_approved_by(ctx.msp_id)

    def run(self, ctx: DeploymentContext) -> bool:
        """Approve unless already approved. Returns True if an approval was submitted."""
        if not ctx.ccid:
            raise StepExecutionError(
                f"Cannot approve {ctx.chaincode} on {ctx.channel}: no package id"
            )

        if self.is_approved(ctx):
            logger.warning(
                f"{ctx.chaincode} with sequence {ctx.sequence} has already been "
                f"approved on {ctx.channel} by {ctx.msp_id}"
            )
            return False

        args = lifecycle_command(self.settings, "approveformyorg")
        args += [
            "--channelID", ctx.channel,
            "--name", ctx.chaincode,
            "--version", self.settings.chaincode_version,
            "--package-id", ctx.ccid,
            "--sequence", str(ctx.sequence),
        ]
        args += orderer_args(self.settings)

        self.runner.run(args)
        logger.info(
            f"{ctx.msp_id} approved {ctx.chaincode} ({ctx.ccid}) "
            f"with sequence {ctx.sequence} on {ctx.channel}"
        )
        return True
