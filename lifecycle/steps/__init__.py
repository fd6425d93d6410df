"""Local lifecycle steps.

Each step turns the DeploymentContext into one or two `peer lifecycle
chaincode` invocations and extracts its result:
- install: package + install, extracts the package id
- sequence: querycommitted, derives the next sequence
- approve: checkcommitreadiness + approveformyorg
- commit: commit with every member as endorser
- installed: queryinstalled, finds the package id for a channel
"""

from lifecycle.steps.approve import ApproveStep
from lifecycle.steps.commit import CommitStep
from lifecycle.steps.install import InstallStep
from lifecycle.steps.installed import InstalledQuery
from lifecycle.steps.sequence import SequenceNegotiator

__all__ = [
    "ApproveStep",
    "CommitStep",
    "InstallStep",
    "InstalledQuery",
    "SequenceNegotiator",
]
