"""Typed views of the discovery service's JSON answers.

Only the fields the coordinator reads are modelled; everything else the
discovery CLI returns is ignored. Absent fields are optional rather than
failing the whole response.
"""

from pydantic import BaseModel, ConfigDict, Field


class DiscoveredPeer(BaseModel):
    """One entry of `discover peers` output."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    msp_id: str = Field(alias="MSPID")
    endpoint: str = Field(alias="Endpoint")


class MSPConfig(BaseModel):
    """Trust configuration of one MSP in `discover config` output."""

    model_config = ConfigDict(extra="ignore")

    tls_root_certs: list[str] = Field(default_factory=list)


class DiscoveryConfig(BaseModel):
    """`discover config` output."""

    model_config = ConfigDict(extra="ignore")

    msps: dict[str, MSPConfig] = Field(default_factory=dict)
