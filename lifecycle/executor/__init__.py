"""External command execution.

Every interaction with the peer and discovery CLIs goes through the
CommandRunner, which captures stdout (primary output, usually JSON) and
stderr (diagnostics, where the peer CLI writes its logs).
"""

from lifecycle.executor.command_runner import CommandResult, CommandRunner

__all__ = ["CommandResult", "CommandRunner"]
