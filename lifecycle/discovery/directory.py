"""Node directory: resolves the organizations participating in a channel.

Two discovery queries are combined:
- `discover peers` gives each peer's MSP id and endpoint
  (`<slot>.<service>.<host>:<port>`, e.g. peer-0.peer.org1.example.com:7051)
- `discover config` gives each MSP's TLS root certificates (base64)

Each peer becomes a ParticipantNode whose TLS root certificate is written to a
temporary file, because the peer CLI only accepts certificates as file paths.
A certificate that cannot be found or decoded is not fatal: the node is kept
without a trust anchor and the problem is logged.
"""

import base64
import binascii
import logging
import os
import tempfile
from typing import Optional

from lifecycle.config import LifecycleSettings
from lifecycle.discovery.identity import LocalIdentity, load_identity
from lifecycle.discovery.schemas import DiscoveredPeer, DiscoveryConfig
from lifecycle.errors import DiscoveryError, StepExecutionError
from lifecycle.executor.command_runner import CommandRunner
from lifecycle.schemas import ParticipantNode

logger = logging.getLogger(__name__)


def parse_endpoint(endpoint: str) -> tuple[str, str]:
    """Split a peer endpoint into (slot name, host).

    >>> parse_endpoint("peer-0.peer.org1.example.com:7051")
    ('peer-0', 'org1.example.com')
    """
    address = endpoint.split(":", 1)[0]
    labels = address.split(".")
    if len(labels) < 3 or not all(labels):
        raise DiscoveryError(
            f"Malformed peer endpoint '{endpoint}': expected <slot>.<service>.<host>"
        )
    return labels[0], ".".join(labels[2:])


class NodeDirectory:
    """Discovers channel members through the discovery CLI."""

    def __init__(self, settings: LifecycleSettings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    def discover(self, channel: str) -> list[ParticipantNode]:
        """Return one node per discovered peer, in discovery order."""
        identity = load_identity(self.settings.msp_config_path)

        peers = self._query_peers(channel, identity)
        config = self._query_config(channel, identity)

        nodes: list[ParticipantNode] = []
        try:
            for peer in peers:
                name, host = parse_endpoint(peer.endpoint)
                if not peer.msp_id.strip():
                    raise DiscoveryError(f"Peer {peer.endpoint} has no MSP id")
                root_ca = self._write_trust_anchor(peer.msp_id, config)
                nodes.append(
                    ParticipantNode(msp_id=peer.msp_id, host=host, name=name, root_ca=root_ca)
                )
        except DiscoveryError:
            # trust anchors of the nodes built so far
            self.cleanup(nodes)
            raise

        logger.info(
            f"Discovered {len(nodes)} nodes on {channel}: "
            f"{', '.join(f'{n.msp_id}@{n.host}' for n in nodes)}"
        )
        return nodes

    def cleanup(self, nodes: list[ParticipantNode]) -> None:
        """Best-effort removal of the trust-anchor files written by discover()."""
        for node in nodes:
            if not node.root_ca:
                continue
            try:
                os.remove(node.root_ca)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Could not remove trust anchor {node.root_ca}: {e}")

    def _discover_args(self, command: str, channel: str, identity: LocalIdentity) -> list[str]:
        return [
            self.settings.discover_binary, command,
            "--channel", channel,
            "--server", self.settings.peer_address,
            "--peerTLSCA", self.settings.peer_tls_root_cert,
            "--userKey", str(identity.key_file),
            "--userCert", str(identity.cert_file),
            "--MSP", self.settings.msp_id,
        ]

    def _query_peers(self, channel: str, identity: LocalIdentity) -> list[DiscoveredPeer]:
        try:
            result = self.runner.run(self._discover_args("peers", channel, identity))
            return result.parse_json_list(DiscoveredPeer)
        except StepExecutionError as e:
            raise DiscoveryError(f"Peer discovery failed on {channel}: {e}") from e

    def _query_config(self, channel: str, identity: LocalIdentity) -> DiscoveryConfig:
        try:
            result = self.runner.run(self._discover_args("config", channel, identity))
            return result.parse_json(DiscoveryConfig)
        except StepExecutionError as e:
            raise DiscoveryError(f"Config discovery failed on {channel}: {e}") from e

    def _write_trust_anchor(self, msp_id: str, config: DiscoveryConfig) -> Optional[str]:
        msp = config.msps.get(msp_id)
        if msp is None or not msp.tls_root_certs:
            logger.warning(f"No TLS root certificate found for {msp_id}")
            return None

        try:
            root_ca = base64.b64decode(msp.tls_root_certs[0], validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"Could not decode TLS root certificate of {msp_id}: {e}")
            return None

        try:
            with tempfile.NamedTemporaryFile(
                mode="wb", prefix=f"{msp_id}-", suffix=".pem", delete=False
            ) as f:
                f.write(root_ca)
        except OSError as e:
            raise DiscoveryError(f"Could not store TLS root certificate of {msp_id}: {e}") from e
        return f.name
