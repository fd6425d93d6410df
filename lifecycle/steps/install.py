"""Install step: packages the chaincode as an external service and installs it.

The package is a tgz holding metadata.json and code.tar.gz (which itself
holds connection.json). The package id the peer assigns is a hash of the
package bytes, so archives are built with fixed timestamps, owners and modes:
every organization builds an identical package and ends up with the same
package id, which is what lets the deploying organization send its own CCID
along with delegated approvals.
"""

import gzip
import logging
import re
import tarfile
import tempfile
from pathlib import Path

from lifecycle.config import LifecycleSettings
from lifecycle.errors import StepExecutionError
from lifecycle.executor.command_runner import CommandResult, CommandRunner
from lifecycle.schemas import DeploymentContext
from lifecycle.steps.peer_cli import lifecycle_command, local_peer_args
from lifecycle.steps.schemas import ConnectionDescriptor, PackageMetadata

logger = logging.getLogger(__name__)

# Peer answer when the identical package is already installed
ALREADY_INSTALLED_MARKER = "chaincode already successfully installed"


def _add_file(tar: tarfile.TarFile, path: Path, arcname: str) -> None:
    info = tarfile.TarInfo(name=arcname)
    info.size = path.stat().st_size
    info.mtime = 0
    info.mode = 0o644
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    with open(path, "rb") as f:
        tar.addfile(info, f)


def write_archive(dest: Path, members: list[Path]) -> Path:
    """Write a reproducible .tar.gz of `members` (stored by file name) to `dest`."""
    with open(dest, "wb") as raw:
        with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
            with tarfile.open(fileobj=gz, mode="w", format=tarfile.USTAR_FORMAT) as tar:
                for member in members:
                    _add_file(tar, member, member.name)
    return dest


def build_package(settings: LifecycleSettings, chaincode: str, workdir: Path) -> Path:
    """Write connection.json and metadata.json and archive them into <chaincode>.tgz."""
    connection = ConnectionDescriptor(
        address=f"{chaincode}:{settings.chaincode_port}",
        dial_timeout=settings.dial_timeout,
        tls_required=False,
    )
    metadata = PackageMetadata(label=chaincode, path="", type="external")

    connection_file = workdir / "connection.json"
    connection_file.write_text(connection.model_dump_json())
    metadata_file = workdir / "metadata.json"
    metadata_file.write_text(metadata.model_dump_json())

    code_archive = write_archive(workdir / "code.tar.gz", [connection_file])
    return write_archive(workdir / f"{chaincode}.tgz", [code_archive, metadata_file])


class InstallStep:
    """Installs the chaincode package on the local peer."""

    def __init__(self, settings: LifecycleSettings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    def run(self, ctx: DeploymentContext) -> str:
        """Install and return the package id ('' when the peer did not report one).

        Sets ctx.ccid to the returned value.
        """
        with tempfile.TemporaryDirectory(prefix=f"{ctx.chaincode}-") as tmp:
            package = build_package(self.settings, ctx.chaincode, Path(tmp))
            args = lifecycle_command(self.settings, "install") + [str(package)]
            args += local_peer_args(self.settings)
            result = self.runner.run(args, check=False)

        if not result.ok:
            if ALREADY_INSTALLED_MARKER not in result.stderr:
                raise StepExecutionError(
                    f"Installing {ctx.chaincode} failed with status {result.returncode}: "
                    f"{result.stderr_tail()}",
                    result=result,
                )
            logger.warning(f"{ctx.chaincode} is already installed on {ctx.msp_id}")

        ctx.ccid = extract_package_id(result, ctx.chaincode)
        if not ctx.ccid:
            logger.warning(f"No package id for {ctx.chaincode} found in install output")
        return ctx.ccid


def extract_package_id(result: CommandResult, chaincode: str) -> str:
    """Find `<chaincode>:<hash>` in the install diagnostics."""
    return result.find_in_logs(rf"{re.escape(chaincode)}:\w*")
