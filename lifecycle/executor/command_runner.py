"""Runs external lifecycle commands and captures their output.

The peer CLI writes its logs (including the package id on install) to stderr
and its JSON answers (-O json) to stdout, so both streams are kept apart.
Commands are argument vectors, never shell strings.
"""

import json
import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from lifecycle.errors import StepExecutionError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Max chars of stderr quoted in error messages
STDERR_TAIL_CHARS = 2000


@dataclass
class CommandResult:
    """Captured output of one external command."""
    args: list[str]
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return " ".join(self.args)

    def find_in_logs(self, pattern: str) -> str:
        """First match of `pattern` in the diagnostic stream, or ''."""
        match = re.search(pattern, self.stderr)
        return match.group(0) if match else ""

    def stderr_tail(self) -> str:
        tail = self.stderr.strip()
        if len(tail) > STDERR_TAIL_CHARS:
            tail = "..." + tail[-STDERR_TAIL_CHARS:]
        return tail

    def parse_json(self, model: type[ModelT]) -> ModelT:
        """Decode stdout into `model`, raising StepExecutionError on mismatch."""
        try:
            return model.model_validate_json(self.stdout)
        except ValidationError as e:
            raise StepExecutionError(
                f"Unexpected output from '{self.args[0] if self.args else ''}': {e}",
                result=self,
            ) from e

    def parse_json_list(self, model: type[ModelT]) -> list[ModelT]:
        """Decode a JSON array on stdout into a list of `model`."""
        try:
            data = json.loads(self.stdout)
        except json.JSONDecodeError as e:
            raise StepExecutionError(f"Output is not valid JSON: {e}", result=self) from e
        if not isinstance(data, list):
            raise StepExecutionError(
                f"Expected a JSON array, got {type(data).__name__}", result=self
            )
        try:
            return [model.model_validate(item) for item in data]
        except ValidationError as e:
            raise StepExecutionError(f"Unexpected entry in JSON array: {e}", result=self) from e


class CommandRunner:
    """Synchronous subprocess execution with captured output."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run(self, args: Sequence[str], *, check: bool = True) -> CommandResult:
        """Run `args` and return its captured output.

        With check=True a non-zero exit raises StepExecutionError carrying the
        result; with check=False the caller inspects `returncode` itself.
        A timeout or a missing executable always raises.
        """
        args = [str(a) for a in args]
        logger.debug(f"Running: {' '.join(args)}")
        result = self._spawn(args)
        if result.stderr:
            logger.debug(f"{args[0]} stderr:\n{result.stderr.rstrip()}")

        if check and not result.ok:
            raise StepExecutionError(
                f"'{result.command_line}' exited with status {result.returncode}: "
                f"{result.stderr_tail()}",
                result=result,
            )
        return result

    def _spawn(self, args: list[str]) -> CommandResult:
        try:
            proc = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise StepExecutionError(
                f"'{' '.join(args)}' timed out after {self.timeout}s"
            ) from e
        except OSError as e:
            raise StepExecutionError(f"Could not start '{args[0]}': {e}") from e

        return CommandResult(
            args=args,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            returncode=proc.returncode,
        )
