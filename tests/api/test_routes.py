"""Tests for the HTTP surface."""

from __future__ import annotations

import json
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from lifecycle.api.main import app
from lifecycle.api.routes import lifecycle as lifecycle_routes
from lifecycle.config import LifecycleSettings
from lifecycle.orchestrator.service import LifecycleService
from lifecycle.remote.delegate import RemoteDelegate
from tests.helpers.fakes import (
    CCID,
    INSTALL_LOG,
    ORG1_CA,
    ORG2_CA,
    FakeRunner,
    RemoteCoordinators,
    arg_value,
    config_json,
    peers_json,
    readiness_json,
)


@pytest.fixture
def client(
    settings: LifecycleSettings, runner: FakeRunner, delegate: RemoteDelegate
) -> Iterator[TestClient]:
    lifecycle_routes.init_service(LifecycleService(settings, runner=runner, delegate=delegate))
    try:
        yield TestClient(app)
    finally:
        lifecycle_routes.init_service(None)


class TestInstalledEndpoint:
    """GET /{channel}/installed/{chaincode}"""

    def test_found(self, client: TestClient, runner: FakeRunner) -> None:
        runner.on(
            "queryinstalled",
            stdout=json.dumps({"installed_chaincodes": [
                {"package_id": CCID, "label": "mycc", "references": {"mychannel": {}}}
            ]}),
        )
        response = client.get("/mychannel/installed/mycc")
        assert response.status_code == 200
        assert response.text == CCID

    def test_not_found_is_404(self, client: TestClient, runner: FakeRunner) -> None:
        runner.on("queryinstalled", stdout='{"installed_chaincodes": []}')
        response = client.get("/mychannel/installed/mycc")
        assert response.status_code == 404
        assert response.text == "CCID for mycc could not be found on mychannel"

    def test_query_failure_is_500(self, client: TestClient, runner: FakeRunner) -> None:
        runner.on("queryinstalled", stderr="Error: peer unreachable", returncode=1)
        response = client.get("/mychannel/installed/mycc")
        assert response.status_code == 500
        assert response.text.startswith("Error: ")
        assert "peer unreachable" in response.text


class TestInstallEndpoint:
    """GET /install/{chaincode}"""

    def test_returns_package_id(self, client: TestClient, runner: FakeRunner) -> None:
        runner.on("install", stderr=INSTALL_LOG)
        response = client.get("/install/mycc")
        assert response.status_code == 200
        assert response.text == CCID

    def test_failure_is_500(self, client: TestClient, runner: FakeRunner) -> None:
        runner.on("install", stderr="Error: permission denied", returncode=1)
        response = client.get("/install/mycc")
        assert response.status_code == 500
        assert "permission denied" in response.text


class TestApproveEndpoint:
    """GET /{channel}/approve/{chaincode}/{sequence}/{ccid}"""

    def test_approves_with_given_sequence_and_ccid(
        self, client: TestClient, runner: FakeRunner
    ) -> None:
        runner.on("checkcommitreadiness", stdout=readiness_json({"Org1MSP": False}))

        response = client.get(f"/mychannel/approve/mycc/3/{CCID}")

        assert response.status_code == 200
        assert response.text == "approved"
        (call,) = runner.calls_for("approveformyorg")
        assert arg_value(call, "--sequence") == "3"
        assert arg_value(call, "--package-id") == CCID
        assert arg_value(call, "--channelID") == "mychannel"

    def test_already_approved_is_success(self, client: TestClient, runner: FakeRunner) -> None:
        runner.on("checkcommitreadiness", stdout=readiness_json({"Org1MSP": True}))

        response = client.get(f"/mychannel/approve/mycc/3/{CCID}")

        assert response.status_code == 200
        assert response.text == "already approved"
        assert runner.calls_for("approveformyorg") == []

    def test_non_numeric_sequence_is_rejected(self, client: TestClient, runner: FakeRunner) -> None:
        response = client.get(f"/mychannel/approve/mycc/latest/{CCID}")
        assert response.status_code == 422
        assert runner.calls == []

    @pytest.mark.parametrize("sequence", ["0", "-1"])
    def test_sequence_below_one_is_rejected(
        self, client: TestClient, runner: FakeRunner, sequence: str
    ) -> None:
        response = client.get(f"/mychannel/approve/mycc/{sequence}/{CCID}")
        assert response.status_code == 422
        assert runner.calls == []


class TestDeployEndpoint:
    """GET /{channel}/deploy/{chaincode}"""

    def _script(self, runner: FakeRunner) -> None:
        runner.on(
            "peers",
            stdout=peers_json(
                ("Org1MSP", "peer-0.peer.org1.example.com:7051"),
                ("Org2MSP", "peer-0.peer.org2.example.com:7051"),
            ),
        )
        runner.on("config", stdout=config_json({"Org1MSP": ORG1_CA, "Org2MSP": ORG2_CA}))
        runner.on("install", stderr=INSTALL_LOG)
        runner.on("querycommitted", stdout='{"sequence": 1, "version": "1.0"}')
        runner.on("checkcommitreadiness", stdout=readiness_json({}))

    def test_success(self, client: TestClient, runner: FakeRunner) -> None:
        self._script(runner)

        response = client.get("/mychannel/deploy/mycc")

        assert response.status_code == 200
        body = response.json()
        assert body["ccid"] == CCID
        assert body["sequence"] == 2
        assert body["organizations"] == ["Org1MSP", "Org2MSP"]
        assert body["completed_stages"][-1] == "done"

    def test_remote_failure_is_500_with_organization(
        self, client: TestClient, runner: FakeRunner, remotes: RemoteCoordinators
    ) -> None:
        self._script(runner)
        remotes.fail("lifecycle.org2.example.com", 503)

        response = client.get("/mychannel/deploy/mycc")

        assert response.status_code == 500
        assert "Org2MSP returned status code 503" in response.text
        assert runner.calls_for("commit") == []


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


def test_uninitialized_service_is_503() -> None:
    lifecycle_routes.init_service(None)
    response = TestClient(app).get("/install/mycc")
    assert response.status_code == 503
