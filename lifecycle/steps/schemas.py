"""Typed records for the peer lifecycle CLI.

Two groups:
- Package descriptors written into the chaincode package on install
- Decoded `-O json` answers of the lifecycle queries
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Package descriptors ---


class ConnectionDescriptor(BaseModel):
    """connection.json: how the peer reaches the external chaincode server."""

    address: str
    dial_timeout: str = "10s"
    tls_required: bool = False
    client_auth_required: bool = False
    client_key: str = ""
    client_cert: str = ""
    root_cert: str = ""


class PackageMetadata(BaseModel):
    """metadata.json: identifies the package as an external-service chaincode."""

    path: str = ""
    type: str = "external"
    label: str


# --- Query answers ---


class CommitReadiness(BaseModel):
    """`checkcommitreadiness -O json`: approval flag per MSP."""

    model_config = ConfigDict(extra="ignore")

    approvals: dict[str, bool] = Field(default_factory=dict)

    def is_approved_by(self, msp_id: str) -> bool:
        return self.approvals.get(msp_id, False)


class CommittedDefinition(BaseModel):
    """`querycommitted --name -O json`: the committed chaincode definition."""

    model_config = ConfigDict(extra="ignore")

    sequence: Optional[int] = None
    version: Optional[str] = None


class InstalledChaincode(BaseModel):
    """One entry of `queryinstalled -O json`."""

    model_config = ConfigDict(extra="ignore")

    package_id: str = ""
    label: str = ""
    references: Optional[dict[str, Any]] = None

    def is_referenced_by(self, channel: str) -> bool:
        return bool(self.references) and channel in self.references


class InstalledChaincodes(BaseModel):
    """`queryinstalled -O json`."""

    model_config = ConfigDict(extra="ignore")

    installed_chaincodes: list[InstalledChaincode] = Field(default_factory=list)
