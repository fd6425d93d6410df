"""Chaincode Lifecycle Coordinator.

Deploys an external-service chaincode across every organization of a channel:
- Discovers the channel members through the discovery service
- Installs and approves locally, or delegates to the member's coordinator
- Negotiates the next definition sequence and commits once for everyone
"""

__version__ = "0.1.0"
