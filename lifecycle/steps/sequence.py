"""Sequence negotiation: the next definition sequence for a chaincode.

A chaincode that was never committed is reported by the peer as an error
("namespace <name> is not defined"). That case means "no prior commit" and
leaves the context sequence at its default of 1. Every other query failure
aborts the deployment.
"""

import logging
import re

from lifecycle.config import LifecycleSettings
from lifecycle.errors import StepExecutionError
from lifecycle.executor.command_runner import CommandResult, CommandRunner
from lifecycle.schemas import DeploymentContext
from lifecycle.steps.peer_cli import lifecycle_command, local_peer_args, orderer_args
from lifecycle.steps.schemas import CommittedDefinition

logger = logging.getLogger(__name__)

_NOT_COMMITTED_RE = re.compile(r"namespace \S+ is not defined|status: 404", re.IGNORECASE)


def is_not_committed(result: CommandResult) -> bool:
    """Whether a failed querycommitted means the chaincode has no definition yet."""
    return bool(_NOT_COMMITTED_RE.search(result.stderr))


class SequenceNegotiator:
    """Derives the next usable sequence from the committed definition."""

    def __init__(self, settings: LifecycleSettings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    def query_committed(self, ctx: DeploymentContext) -> CommandResult:
        args = lifecycle_command(self.settings, "querycommitted")
        args += ["--channelID", ctx.channel, "--name", ctx.chaincode]
        args += orderer_args(self.settings)
        args += local_peer_args(self.settings)
        args += ["-O", "json"]
        return self.runner.run(args, check=False)

    def next_sequence(self, ctx: DeploymentContext) -> int:
        """Set ctx.sequence to committed + 1 (unchanged if nothing is committed) and return it."""
        result = self.query_committed(ctx)

        if not result.ok:
            if is_not_committed(result):
                logger.info(f"{ctx.chaincode} has no committed definition on {ctx.channel}")
                return ctx.sequence
            raise StepExecutionError(
                f"Querying the committed definition of {ctx.chaincode} on {ctx.channel} "
                f"failed with status {result.returncode}: {result.stderr_tail()}",
                result=result,
            )

        try:
            committed = result.parse_json(CommittedDefinition)
        except StepExecutionError:
            if self.settings.strict_sequence_decoding:
                raise
            logger.warning(
                f"Could not decode committed definition of {ctx.chaincode}; "
                f"keeping sequence {ctx.sequence}"
            )
            return ctx.sequence

        if not committed.sequence:
            return ctx.sequence

        ctx.sequence = committed.sequence + 1
        return ctx.sequence
