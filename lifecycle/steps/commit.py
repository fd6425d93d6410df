"""Commit step: finalizes the approved definition on the channel.

The commit transaction needs endorsements from the channel members, so every
discovered node is passed as a --peerAddresses / --tlsRootCertFiles pair.
"""

import logging

from lifecycle.config import LifecycleSettings
from lifecycle.errors import StepExecutionError
from lifecycle.executor.command_runner import CommandRunner
from lifecycle.schemas import DeploymentContext, ParticipantNode
from lifecycle.steps.peer_cli import definition_args, lifecycle_command, orderer_args

logger = logging.getLogger(__name__)


class CommitStep:
    """Commits the chaincode definition, collecting endorsements from all nodes."""

    def __init__(self, settings: LifecycleSettings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    def endorsing_nodes(self, nodes: list[ParticipantNode]) -> list[ParticipantNode]:
        """Nodes asked to endorse, optionally restricted to one peer slot."""
        slot = self.settings.commit_peer_slot
        if not slot:
            return list(nodes)
        return [n for n in nodes if n.name == slot]

    def peer_address(self, node: ParticipantNode) -> str:
        return f"{self.settings.peer_service}.{node.host}:{self.settings.peer_port}"

    def build_args(self, ctx: DeploymentContext) -> list[str]:
        nodes = self.endorsing_nodes(ctx.nodes)
        if not nodes:
            raise StepExecutionError(
                f"Cannot commit {ctx.chaincode} on {ctx.channel}: no endorsing nodes"
            )

        args = lifecycle_command(self.settings, "commit")
        args += definition_args(self.settings, ctx.channel, ctx.chaincode, ctx.sequence)
        args += orderer_args(self.settings)
        for node in nodes:
            if not node.root_ca:
                raise StepExecutionError(
                    f"Cannot commit {ctx.chaincode}: no TLS root certificate for {node.msp_id}"
                )
            args += ["--peerAddresses", self.peer_address(node), "--tlsRootCertFiles", node.root_ca]
        return args

    def run(self, ctx: DeploymentContext) -> None:
        args = self.build_args(ctx)
        self.runner.run(args)
        logger.info(
            f"Committed {ctx.chaincode} with sequence {ctx.sequence} on {ctx.channel}"
        )
