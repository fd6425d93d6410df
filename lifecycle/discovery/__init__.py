"""Channel membership discovery."""

from lifecycle.discovery.directory import NodeDirectory, parse_endpoint
from lifecycle.discovery.identity import LocalIdentity, load_identity

__all__ = [
    "LocalIdentity",
    "NodeDirectory",
    "load_identity",
    "parse_endpoint",
]
