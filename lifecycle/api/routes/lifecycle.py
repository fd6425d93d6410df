"""Lifecycle API routes.

Endpoints:
    GET /{channel}/deploy/{chaincode}                       Full deployment across the channel
    GET /install/{chaincode}                                Install on the local peer
    GET /{channel}/approve/{chaincode}/{sequence}/{ccid}    Approve for the local organization
    GET /{channel}/installed/{chaincode}                    Package id installed for the channel

install and approve are what other organizations' coordinators call while
they deploy. Handlers are plain functions: the steps block on subprocesses,
so FastAPI runs each request in its own worker thread. Failures surface as
LifecycleError and are rendered as 500 plain-text responses by the app.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Path
from fastapi.responses import PlainTextResponse

from lifecycle.orchestrator.service import LifecycleService
from lifecycle.schemas import DeployResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lifecycle"])

_service: Optional[LifecycleService] = None


def init_service(service: Optional[LifecycleService]) -> None:
    global _service
    _service = service


def is_initialized() -> bool:
    return _service is not None


def _get_service() -> LifecycleService:
    if _service is None:
        raise HTTPException(status_code=503, detail="Lifecycle service not initialized")
    return _service


@router.get("/{channel}/deploy/{chaincode}", response_model=DeployResult)
def deploy(channel: str, chaincode: str) -> DeployResult:
    """Deploy `chaincode` to `channel`: discover, install, approve and commit."""
    return _get_service().deploy(channel, chaincode)


@router.get("/install/{chaincode}", response_class=PlainTextResponse)
def install(chaincode: str) -> PlainTextResponse:
    """Install `chaincode` on the local peer. Returns the package id."""
    ccid = _get_service().install(chaincode)
    return PlainTextResponse(ccid)


@router.get("/{channel}/approve/{chaincode}/{sequence}/{ccid}", response_class=PlainTextResponse)
def approve(
    channel: str, chaincode: str, ccid: str, sequence: int = Path(ge=1)
) -> PlainTextResponse:
    """Approve `ccid` at `sequence` for the local organization."""
    submitted = _get_service().approve(channel, chaincode, sequence, ccid)
    return PlainTextResponse("approved" if submitted else "already approved")


@router.get("/{channel}/installed/{chaincode}", response_class=PlainTextResponse)
def installed(channel: str, chaincode: str) -> PlainTextResponse:
    """Package id of `chaincode` installed for `channel`, 404 if there is none."""
    ccid = _get_service().installed(channel, chaincode)
    if ccid is None:
        return PlainTextResponse(
            f"CCID for {chaincode} could not be found on {channel}",
            status_code=404,
        )
    return PlainTextResponse(ccid)
