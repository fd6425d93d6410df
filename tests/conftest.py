"""Shared fixtures for the lifecycle coordinator test suite."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from lifecycle.config import LifecycleSettings
from lifecycle.remote.delegate import RemoteDelegate
from tests.helpers.fakes import FakeRunner, RemoteCoordinators


@pytest.fixture
def identity_store(tmp_path: Path) -> Path:
    """MSP config directory with one key and one signing certificate."""
    msp = tmp_path / "msp"
    (msp / "keystore").mkdir(parents=True)
    (msp / "signcerts").mkdir(parents=True)
    (msp / "keystore" / "3f9a_sk").write_text("key")
    (msp / "signcerts" / "cert.pem").write_text("cert")
    return msp


@pytest.fixture
def settings(identity_store: Path) -> LifecycleSettings:
    return LifecycleSettings(
        msp_id="Org1MSP",
        peer_address="peer-0.peer.org1.example.com:7051",
        peer_tls_root_cert="/etc/hyperledger/peer/tls/ca.crt",
        msp_config_path=str(identity_store),
        orderer_address="orderer.example.com:7050",
        orderer_ca="/etc/hyperledger/orderer/tls/ca.crt",
        remote_timeout=2.0,
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def remotes() -> RemoteCoordinators:
    return RemoteCoordinators()


@pytest.fixture
def delegate(settings: LifecycleSettings, remotes: RemoteCoordinators) -> RemoteDelegate:
    client = httpx.Client(transport=httpx.MockTransport(remotes))
    return RemoteDelegate(settings, client=client)
