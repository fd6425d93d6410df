"""Local identity material used to sign discovery queries.

The MSP config directory holds a generated key under keystore/ and the
enrollment certificate under signcerts/. File names are not predictable, so
each directory must contain exactly one file.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from lifecycle.errors import IdentityConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalIdentity:
    """Paths of the signing key and certificate of the local organization."""
    key_file: Path
    cert_file: Path


def _single_file(directory: Path, kind: str) -> Path:
    if not directory.is_dir():
        raise IdentityConfigError(f"Missing {kind} directory: {directory}")

    candidates = sorted(p for p in directory.iterdir() if p.is_file())
    if not candidates:
        raise IdentityConfigError(f"Missing {kind}: no file found in {directory}")
    if len(candidates) > 1:
        names = ", ".join(p.name for p in candidates)
        raise IdentityConfigError(
            f"Ambiguous {kind}: expected exactly one file in {directory}, found {names}"
        )
    return candidates[0]


def load_identity(msp_config_path: str) -> LocalIdentity:
    """Locate the keystore entry and signing certificate under `msp_config_path`."""
    if not msp_config_path:
        raise IdentityConfigError("CORE_PEER_MSPCONFIGPATH is not configured")

    root = Path(msp_config_path)
    identity = LocalIdentity(
        key_file=_single_file(root / "keystore", "keystore"),
        cert_file=_single_file(root / "signcerts", "signcert"),
    )
    logger.debug(f"Using identity key={identity.key_file} cert={identity.cert_file}")
    return identity
