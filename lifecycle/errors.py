"""Error taxonomy for the lifecycle coordinator.

Every failure that aborts a request is a LifecycleError. The HTTP layer turns
them into 500 responses carrying the message; the orchestrator stamps the
stage that failed onto the error before re-raising it.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from lifecycle.executor.command_runner import CommandResult


class LifecycleError(Exception):
    """Base class for failures that abort a lifecycle request."""

    def __init__(self, message: str):
        super().__init__(message)
        self.stage: Optional[str] = None


class DiscoveryError(LifecycleError):
    """Channel membership could not be resolved."""


class IdentityConfigError(DiscoveryError):
    """The local identity store does not hold exactly one key and one certificate."""


class StepExecutionError(LifecycleError):
    """A lifecycle command failed or produced output that could not be used."""

    def __init__(self, message: str, result: Optional["CommandResult"] = None):
        super().__init__(message)
        self.result = result


class RemoteDelegationError(LifecycleError):
    """A member's coordinator rejected or did not answer a delegated step."""

    def __init__(self, msp_id: str, status_code: Optional[int], detail: str = ""):
        if status_code is None:
            message = f"{msp_id} could not be reached: {detail}"
        else:
            message = f"{msp_id} returned status code {status_code}"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)
        self.msp_id = msp_id
        self.status_code = status_code
        self.detail = detail
