"""Looks up the package id of a chaincode installed on the local peer."""

import logging
from typing import Optional

from lifecycle.config import LifecycleSettings
from lifecycle.executor.command_runner import CommandRunner
from lifecycle.schemas import DeploymentContext
from lifecycle.steps.peer_cli import lifecycle_command, local_peer_args
from lifecycle.steps.schemas import InstalledChaincodes

logger = logging.getLogger(__name__)


class InstalledQuery:
    """Finds the installed package whose label matches and which the channel references."""

    def __init__(self, settings: LifecycleSettings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    def run(self, ctx: DeploymentContext) -> Optional[str]:
        """Package id of the first match, or None when nothing matches."""
        args = lifecycle_command(self.settings, "queryinstalled")
        args += local_peer_args(self.settings)
        args += ["-O", "json"]

        installed = self.runner.run(args).parse_json(InstalledChaincodes)
        for chaincode in installed.installed_chaincodes:
            if chaincode.label != ctx.chaincode:
                continue
            if not chaincode.is_referenced_by(ctx.channel):
                continue
            if not chaincode.package_id:
                continue
            ctx.ccid = chaincode.package_id
            return chaincode.package_id

        logger.debug(
            f"None of {len(installed.installed_chaincodes)} installed packages "
            f"matches {ctx.chaincode} on {ctx.channel}"
        )
        return None
