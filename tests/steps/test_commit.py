"""Tests for the commit step."""

from __future__ import annotations

import pytest

from lifecycle.config import LifecycleSettings
from lifecycle.errors import StepExecutionError
from lifecycle.schemas import DeploymentContext, ParticipantNode
from lifecycle.steps.commit import CommitStep
from tests.helpers.fakes import CCID, FakeRunner, arg_value, arg_values


def _nodes() -> list[ParticipantNode]:
    return [
        ParticipantNode(msp_id="Org1MSP", host="org1.example.com", name="peer-0", root_ca="/tmp/org1.pem"),
        ParticipantNode(msp_id="Org1MSP", host="org1.example.com", name="peer-1", root_ca="/tmp/org1b.pem"),
        ParticipantNode(msp_id="Org2MSP", host="org2.example.com", name="peer-0", root_ca="/tmp/org2.pem"),
    ]


@pytest.fixture
def ctx(settings: LifecycleSettings) -> DeploymentContext:
    return DeploymentContext(
        msp_id=settings.msp_id,
        channel="mychannel",
        chaincode="mycc",
        sequence=3,
        ccid=CCID,
        nodes=_nodes(),
    )


class TestCommitStep:
    """Commit with every discovered node as endorser."""

    def test_commits_with_every_node(
        self, settings: LifecycleSettings, runner: FakeRunner, ctx: DeploymentContext
    ) -> None:
        CommitStep(settings, runner).run(ctx)

        (call,) = runner.calls_for("commit")
        assert call[:4] == ["peer", "lifecycle", "chaincode", "commit"]
        assert arg_value(call, "--channelID") == "mychannel"
        assert arg_value(call, "--name") == "mycc"
        assert arg_value(call, "--version") == "1.0"
        assert arg_value(call, "--sequence") == "3"
        assert arg_value(call, "-o") == settings.orderer_address
        assert arg_value(call, "--cafile") == settings.orderer_ca
        assert arg_values(call, "--peerAddresses") == [
            "peer.org1.example.com:7051",
            "peer.org1.example.com:7051",
            "peer.org2.example.com:7051",
        ]
        assert arg_values(call, "--tlsRootCertFiles") == [
            "/tmp/org1.pem",
            "/tmp/org1b.pem",
            "/tmp/org2.pem",
        ]

    def test_slot_filter_limits_endorsers(
        self, settings: LifecycleSettings, runner: FakeRunner, ctx: DeploymentContext
    ) -> None:
        settings = settings.model_copy(update={"commit_peer_slot": "peer-0"})
        CommitStep(settings, runner).run(ctx)

        (call,) = runner.calls_for("commit")
        assert arg_values(call, "--tlsRootCertFiles") == ["/tmp/org1.pem", "/tmp/org2.pem"]

    def test_requires_nodes(
        self, settings: LifecycleSettings, runner: FakeRunner, ctx: DeploymentContext
    ) -> None:
        ctx.nodes = []
        with pytest.raises(StepExecutionError, match="no endorsing nodes"):
            CommitStep(settings, runner).run(ctx)
        assert runner.calls == []

    def test_node_without_trust_anchor_aborts(
        self, settings: LifecycleSettings, runner: FakeRunner, ctx: DeploymentContext
    ) -> None:
        ctx.nodes = [ParticipantNode(msp_id="Org2MSP", host="org2.example.com", name="peer-0")]
        with pytest.raises(StepExecutionError, match="Org2MSP"):
            CommitStep(settings, runner).run(ctx)
        assert runner.calls == []

    def test_commit_failure_raises(
        self, settings: LifecycleSettings, runner: FakeRunner, ctx: DeploymentContext
    ) -> None:
        runner.on("commit", stderr="Error: transaction invalidated", returncode=1)
        with pytest.raises(StepExecutionError, match="transaction invalidated"):
            CommitStep(settings, runner).run(ctx)
