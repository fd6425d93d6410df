"""Shared records for one lifecycle request.

ParticipantNode is produced by the node directory and never changes.
DeploymentContext is created per request and filled in as steps complete;
nothing here outlives the request that created it.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeployStage(str, Enum):
    """Ordered stages of a deployment."""
    DISCOVER = "discover"
    INSTALL_ALL = "install_all"
    NEGOTIATE_SEQUENCE = "negotiate_sequence"
    APPROVE_ALL = "approve_all"
    COMMIT = "commit"
    DONE = "done"


class ParticipantNode(BaseModel):
    """One organization's peer as seen by the discovery service."""

    model_config = ConfigDict(frozen=True)

    msp_id: str
    host: str = Field(description="Endpoint host with slot/service labels and port stripped")
    name: str = Field(default="", description="Slot label of the peer, e.g. peer-0")
    root_ca: Optional[str] = Field(
        default=None,
        description="Path to the decoded TLS root certificate, None if unavailable",
    )

    @field_validator("msp_id")
    @classmethod
    def _msp_id_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("msp_id must not be empty")
        return value


class DeploymentContext(BaseModel):
    """Mutable state of a single lifecycle request."""

    msp_id: str
    chaincode: str
    channel: str = ""
    sequence: int = Field(default=1, ge=1)
    ccid: str = ""
    nodes: list[ParticipantNode] = Field(default_factory=list)

    def is_local(self, node: ParticipantNode) -> bool:
        """True when `node` belongs to the organization running this request."""
        return node.msp_id == self.msp_id


class DeployResult(BaseModel):
    """Outcome of a successful deployment."""

    channel: str
    chaincode: str
    ccid: str
    sequence: int
    organizations: list[str] = Field(default_factory=list)
    completed_stages: list[DeployStage] = Field(default_factory=list)
