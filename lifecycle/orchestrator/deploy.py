"""Deploy workflow: drives every channel member through the chaincode lifecycle.

Stages run strictly in order:

    DISCOVER -> INSTALL_ALL -> NEGOTIATE_SEQUENCE -> APPROVE_ALL -> COMMIT -> DONE

INSTALL_ALL and APPROVE_ALL fan out over the discovered nodes in discovery
order. The local organization's node runs the step in-process; every other
node is delegated to that organization's coordinator. The first failure ends
the workflow. Nothing is rolled back: organizations that already installed or
approved stay that way, and a re-run skips them through the steps' own
idempotency guards.
"""

import logging
from typing import Callable

from lifecycle.config import LifecycleSettings
from lifecycle.discovery.directory import NodeDirectory
from lifecycle.errors import DiscoveryError, LifecycleError, StepExecutionError
from lifecycle.remote.delegate import RemoteDelegate
from lifecycle.schemas import DeployResult, DeployStage, DeploymentContext, ParticipantNode
from lifecycle.steps.approve import ApproveStep
from lifecycle.steps.commit import CommitStep
from lifecycle.steps.install import InstallStep
from lifecycle.steps.sequence import SequenceNegotiator

logger = logging.getLogger(__name__)

LocalAction = Callable[[DeploymentContext], object]
RemoteAction = Callable[[ParticipantNode, DeploymentContext], object]


class DeployWorkflow:
    """Runs the full deployment of one chaincode on one channel."""

    def __init__(
        self,
        settings: LifecycleSettings,
        directory: NodeDirectory,
        install: InstallStep,
        sequence: SequenceNegotiator,
        approve: ApproveStep,
        commit: CommitStep,
        delegate: RemoteDelegate,
    ):
        self.settings = settings
        self.directory = directory
        self.install = install
        self.sequence = sequence
        self.approve = approve
        self.commit = commit
        self.delegate = delegate

    def stages(self) -> list[tuple[DeployStage, LocalAction]]:
        return [
            (DeployStage.DISCOVER, self._discover),
            (DeployStage.INSTALL_ALL, self._install_all),
            (DeployStage.NEGOTIATE_SEQUENCE, self._negotiate_sequence),
            (DeployStage.APPROVE_ALL, self._approve_all),
            (DeployStage.COMMIT, self._commit),
        ]

    def run(self, channel: str, chaincode: str) -> DeployResult:
        ctx = DeploymentContext(
            msp_id=self.settings.msp_id,
            channel=channel,
            chaincode=chaincode,
        )
        completed: list[DeployStage] = []

        try:
            for stage, action in self.stages():
                try:
                    action(ctx)
                except LifecycleError as e:
                    e.stage = stage.value
                    logger.error(f"Deploying {chaincode} on {channel} failed at {stage.value}: {e}")
                    raise
                completed.append(stage)
        finally:
            self.directory.cleanup(ctx.nodes)

        completed.append(DeployStage.DONE)
        logger.info(
            f"Deployed {chaincode} ({ctx.ccid}) with sequence {ctx.sequence} on {channel}"
        )
        return DeployResult(
            channel=channel,
            chaincode=chaincode,
            ccid=ctx.ccid,
            sequence=ctx.sequence,
            organizations=[n.msp_id for n in ctx.nodes],
            completed_stages=completed,
        )

    # --- Stages ---

    def _discover(self, ctx: DeploymentContext) -> None:
        logger.info(f"Discovering the network on {ctx.channel}")
        ctx.nodes = self.directory.discover(ctx.channel)
        if not ctx.nodes:
            raise DiscoveryError(f"No nodes discovered on {ctx.channel}")
        logger.info(f"Found {len(ctx.nodes)} nodes")

    def _install_all(self, ctx: DeploymentContext) -> None:
        logger.info(f"Installing {ctx.chaincode}")
        self._fan_out(ctx, "installed the chaincode", self.install.run, self.delegate.install)
        if not ctx.ccid:
            raise StepExecutionError(
                f"Installing {ctx.chaincode} did not yield a package id for {ctx.msp_id}"
            )
        logger.info(f"Installed chaincode with ccid: {ctx.ccid}")

    def _negotiate_sequence(self, ctx: DeploymentContext) -> None:
        logger.info("Calculating next sequence number")
        self.sequence.next_sequence(ctx)
        logger.info(f"Next sequence number: {ctx.sequence}")

    def _approve_all(self, ctx: DeploymentContext) -> None:
        logger.info(f"Approving {ctx.ccid} on {ctx.channel}")
        self._fan_out(
            ctx, "approved the chaincode installation", self.approve.run, self.delegate.approve
        )

    def _commit(self, ctx: DeploymentContext) -> None:
        logger.info(f"Committing {ctx.ccid} to {ctx.channel}")
        self.commit.run(ctx)

    def _fan_out(
        self,
        ctx: DeploymentContext,
        done_message: str,
        local: LocalAction,
        remote: RemoteAction,
    ) -> None:
        """Run a step for every node in order, stopping at the first failure."""
        for node in ctx.nodes:
            if ctx.is_local(node):
                local(ctx)
            else:
                remote(node, ctx)
            logger.info(f"{node.msp_id} {done_message}")
