"""Delegates lifecycle steps to another organization's coordinator.

Only the coordinator of an organization can sign with that organization's
identity, so install and approve for a remote member are requests to that
member's own coordinator. The answer is pass/fail only: any status other
than 200, a timeout or a connection error fails the step. No retries.
"""

import logging
from typing import Optional

import httpx

from lifecycle.config import LifecycleSettings
from lifecycle.errors import RemoteDelegationError
from lifecycle.schemas import DeploymentContext, ParticipantNode

logger = logging.getLogger(__name__)

# Max chars of a remote error body quoted in messages
DETAIL_CHARS = 500


class RemoteDelegate:
    """HTTP client for peer coordinators."""

    def __init__(
        self,
        settings: LifecycleSettings,
        client: Optional[httpx.Client] = None,
    ):
        self.settings = settings
        self._client = client or httpx.Client(timeout=settings.remote_timeout)

    def close(self) -> None:
        self._client.close()

    def install(self, node: ParticipantNode, ctx: DeploymentContext) -> None:
        """Ask `node`'s coordinator to install the chaincode on its peer."""
        self._get(node, f"/install/{ctx.chaincode}")

    def approve(self, node: ParticipantNode, ctx: DeploymentContext) -> None:
        """Ask `node`'s coordinator to approve ctx's definition for its organization."""
        self._get(
            node,
            f"/{ctx.channel}/approve/{ctx.chaincode}/{ctx.sequence}/{ctx.ccid}",
        )

    def _get(self, node: ParticipantNode, path: str) -> httpx.Response:
        url = self.settings.coordinator_url(node.host) + path
        logger.debug(f"Delegating to {node.msp_id}: GET {url}")
        try:
            response = self._client.get(url, timeout=self.settings.remote_timeout)
        except httpx.TimeoutException as e:
            raise RemoteDelegationError(
                node.msp_id, None, f"timed out after {self.settings.remote_timeout}s ({url})"
            ) from e
        except httpx.HTTPError as e:
            raise RemoteDelegationError(node.msp_id, None, f"{e} ({url})") from e

        if response.status_code != 200:
            raise RemoteDelegationError(
                node.msp_id, response.status_code, response.text.strip()[:DETAIL_CHARS]
            )
        return response
