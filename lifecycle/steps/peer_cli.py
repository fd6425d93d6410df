"""Argument builders shared by the `peer lifecycle chaincode` steps."""

from lifecycle.config import LifecycleSettings


def lifecycle_command(settings: LifecycleSettings, subcommand: str) -> list[str]:
    return [settings.peer_binary, "lifecycle", "chaincode", subcommand]


def orderer_args(settings: LifecycleSettings) -> list[str]:
    """Ordering service endpoint with TLS."""
    return [
        "-o", settings.orderer_address,
        "--tls", "true",
        "--cafile", settings.orderer_ca,
    ]


def local_peer_args(settings: LifecycleSettings) -> list[str]:
    """The local peer as the only target."""
    return [
        "--peerAddresses", settings.peer_address,
        "--tlsRootCertFiles", settings.peer_tls_root_cert,
    ]


def definition_args(
    settings: LifecycleSettings,
    channel: str,
    chaincode: str,
    sequence: int,
) -> list[str]:
    """Identifies a chaincode definition: channel, name, version and sequence."""
    return [
        "--channelID", channel,
        "--name", chaincode,
        "--version", settings.chaincode_version,
        "--sequence", str(sequence),
    ]
