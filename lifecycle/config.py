"""Process configuration for the lifecycle coordinator.

Settings are resolved once at startup, in increasing priority:
1. Model defaults
2. An optional YAML file named by LIFECYCLE_CONFIG_FILE
3. Environment variables (the Fabric CORE_PEER_* / ORDERER_* names, plus
   LIFECYCLE_* for coordinator-specific knobs)

The resulting LifecycleSettings object is read-only and is passed explicitly
into every component, so a test can build one per case without touching
os.environ.
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "LIFECYCLE_CONFIG_FILE"

# Environment variable -> settings field
ENV_FIELDS: dict[str, str] = {
    "CORE_PEER_LOCALMSPID": "msp_id",
    "CORE_PEER_ADDRESS": "peer_address",
    "CORE_PEER_TLS_ROOTCERT_FILE": "peer_tls_root_cert",
    "CORE_PEER_MSPCONFIGPATH": "msp_config_path",
    "ORDERER_ADDRESS": "orderer_address",
    "ORDERER_CA": "orderer_ca",
    "LIFECYCLE_HOST": "host",
    "LIFECYCLE_PORT": "port",
    "LIFECYCLE_COORDINATOR_URL_TEMPLATE": "coordinator_url_template",
    "LIFECYCLE_REMOTE_TIMEOUT": "remote_timeout",
    "LIFECYCLE_COMMAND_TIMEOUT": "command_timeout",
    "LIFECYCLE_PEER_BINARY": "peer_binary",
    "LIFECYCLE_DISCOVER_BINARY": "discover_binary",
    "LIFECYCLE_CHAINCODE_PORT": "chaincode_port",
    "LIFECYCLE_PEER_PORT": "peer_port",
    "LIFECYCLE_PEER_SERVICE": "peer_service",
    "LIFECYCLE_CHAINCODE_VERSION": "chaincode_version",
    "LIFECYCLE_DIAL_TIMEOUT": "dial_timeout",
    "LIFECYCLE_COMMIT_PEER_SLOT": "commit_peer_slot",
    "LIFECYCLE_STRICT_SEQUENCE_DECODING": "strict_sequence_decoding",
    "LIFECYCLE_LOG_LEVEL": "log_level",
}


class LifecycleSettings(BaseModel):
    """Read-only configuration shared by all requests."""

    model_config = ConfigDict(frozen=True)

    # Local organization identity (Fabric peer CLI environment)
    msp_id: str = Field(default="", description="Local MSP id (CORE_PEER_LOCALMSPID)")
    peer_address: str = Field(default="", description="Local peer address, host:port")
    peer_tls_root_cert: str = Field(default="", description="Local peer TLS root CA file")
    msp_config_path: str = Field(
        default="",
        description="Identity store holding keystore/ and signcerts/",
    )
    orderer_address: str = ""
    orderer_ca: str = ""

    # HTTP surface
    host: str = "0.0.0.0"
    port: int = 8090
    coordinator_url_template: str = Field(
        default="http://lifecycle.{host}:8090",
        description="Base URL of a member's coordinator; {host} is the node host",
    )
    remote_timeout: float = Field(default=30.0, gt=0)

    # External commands
    command_timeout: Optional[float] = Field(default=None, gt=0)
    peer_binary: str = "peer"
    discover_binary: str = "discover"

    # Chaincode package and endorsement targets
    chaincode_port: int = 7052
    peer_port: int = 7051
    peer_service: str = "peer"
    chaincode_version: str = "1.0"
    dial_timeout: str = "10s"
    commit_peer_slot: Optional[str] = None

    strict_sequence_decoding: bool = True
    log_level: str = "INFO"

    def coordinator_url(self, host: str) -> str:
        """Base URL of the coordinator serving the organization at `host`."""
        return self.coordinator_url_template.format(host=host).rstrip("/")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_file: Optional[Path] = None,
    ) -> "LifecycleSettings":
        """Build settings from an optional YAML file and the environment."""
        if environ is None:
            environ = os.environ

        values: dict[str, Any] = {}

        if config_file is None and environ.get(CONFIG_FILE_ENV):
            config_file = Path(environ[CONFIG_FILE_ENV])
        if config_file is not None:
            values.update(_load_config_file(config_file))

        for env_name, field_name in ENV_FIELDS.items():
            raw = environ.get(env_name)
            if raw is None or raw == "":
                continue
            values[field_name] = raw

        return cls.model_validate(values)


def _load_config_file(path: Path) -> dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    unknown = set(data) - set(LifecycleSettings.model_fields)
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {path}: {sorted(unknown)}")
    logger.info(f"Loaded configuration from {path}")
    return {k: v for k, v in data.items() if k in LifecycleSettings.model_fields}


# Global settings instance
_settings: Optional[LifecycleSettings] = None


def get_settings() -> LifecycleSettings:
    """Get the process-wide settings, resolving them on first use."""
    global _settings
    if _settings is None:
        _settings = LifecycleSettings.from_env()
    return _settings
