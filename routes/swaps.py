"""
Swap lifecycle endpoints used by the relayer.

server.py calls configure() once at startup with the controller and the
admin token; administrative endpoints require the X-Admin-Token header.
"""

import hmac
import logging
from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException, Query
from pydantic import BaseModel, Field

from swapcoord.core import (
    SwapError, InvalidTimelock, SwapAlreadyExists, SwapNotFound,
    InsufficientEscrowBalance, SecretMismatch, ArityMismatch, NotAuthorized,
    EscrowError,
)
from swapcoord.htlc.commitment import to_bytes32
from swapcoord.htlc.timelocks import DEFAULT_SCHEDULE

log = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# Module state (set by server.py at init)
# ---------------------------------------------------------------------------

_controller = None
_admin_token = ""


def configure(controller, admin_token: str = ""):
    """Configure swap routes. Called once at startup by server.py."""
    global _controller, _admin_token
    _controller = controller
    _admin_token = admin_token


def _get_controller():
    if _controller is None:
        raise HTTPException(503, "Coordinator not configured")
    return _controller


def _caller(token: Optional[str]) -> Optional[str]:
    """Relayer identity if the token matches, else anonymous."""
    if token and _admin_token and hmac.compare_digest(token, _admin_token):
        return _get_controller().admin
    return None


_STATUS_CODES = {
    SwapNotFound: 404,
    SwapAlreadyExists: 409,
    InvalidTimelock: 400,
    ArityMismatch: 400,
    SecretMismatch: 400,
    InsufficientEscrowBalance: 402,
    NotAuthorized: 403,
}


def _http_error(e: SwapError) -> HTTPException:
    return HTTPException(_STATUS_CODES.get(type(e), 400), {"error": e.code, "message": str(e)})


def _bytes32(value: str, name: str) -> bytes:
    try:
        return to_bytes32(value)
    except ValueError as e:
        raise HTTPException(400, f"Invalid {name}: {e}")


# =============================================================================
# MODELS
# =============================================================================

class SwapCreateRequest(BaseModel):
    swap_id: str = Field(..., description="bytes32 hex")
    hashlock: str = Field(..., description="SHA256(secret), bytes32 hex")
    counterparty_amount: int = Field(..., ge=0)
    counterparty_asset: str = Field(..., description="bytes32 hex id of the SUI asset")
    schedule: List[int] = Field(default_factory=lambda: list(DEFAULT_SCHEDULE.to_tuple()),
                                min_length=7, max_length=7)
    maker: str = ""
    taker: str = ""
    amount: int = Field(0, ge=0)
    safety_deposit: int = Field(0, ge=0)


class ReferenceUpdateRequest(BaseModel):
    object_ref: int = Field(..., ge=0, lt=2**64)
    tx_ref: str = Field(..., description="SUI transaction digest, bytes32 hex")


class RevealRequest(BaseModel):
    secret: str = Field(..., description="bytes32 hex")
    chain_id: int


class BatchReferenceRequest(BaseModel):
    swap_ids: List[str]
    object_refs: List[int]
    tx_refs: List[str]


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/api/swap/create")
def create_swap(req: SwapCreateRequest):
    """Lock the ETH leg and open the swap record."""
    controller = _get_controller()
    try:
        record = controller.create(
            _bytes32(req.swap_id, "swap_id"),
            _bytes32(req.hashlock, "hashlock"),
            req.counterparty_amount,
            _bytes32(req.counterparty_asset, "counterparty_asset"),
            req.schedule,
            maker=req.maker,
            taker=req.taker,
            amount=req.amount,
            safety_deposit=req.safety_deposit,
        )
    except SwapError as e:
        raise _http_error(e)
    except EscrowError as e:
        log.error(f"Escrow lock failed: {e}")
        raise HTTPException(502, f"Escrow lock failed: {e}")
    return record.to_dict()


@router.get("/api/swap/{swap_id}")
async def get_swap(swap_id: str):
    record = _get_controller().get_record(_bytes32(swap_id, "swap_id"))
    if record is None:
        raise HTTPException(404, "Swap not found")
    return record.to_dict()


@router.get("/api/swaps")
async def list_swaps(active_only: bool = Query(False)):
    controller = _get_controller()
    records = controller.get_active_swaps() if active_only else controller.store.records()
    return {
        "count": len(records),
        "swaps": [r.to_dict() for r in records],
    }


@router.post("/api/swap/{swap_id}/reference")
async def update_reference(swap_id: str, req: ReferenceUpdateRequest,
                           x_admin_token: Optional[str] = Header(None)):
    controller = _get_controller()
    try:
        record = controller.update_reference(
            _bytes32(swap_id, "swap_id"), req.object_ref, _bytes32(req.tx_ref, "tx_ref"),
            caller=_caller(x_admin_token),
        )
    except SwapError as e:
        raise _http_error(e)
    return record.to_dict()


@router.post("/api/swap/{swap_id}/reveal")
async def reveal_secret(swap_id: str, req: RevealRequest):
    controller = _get_controller()
    try:
        record = controller.record_secret_reveal(
            _bytes32(swap_id, "swap_id"), _bytes32(req.secret, "secret"), req.chain_id
        )
    except SwapError as e:
        raise _http_error(e)
    return record.to_dict()


@router.post("/api/swap/{swap_id}/deactivate")
async def deactivate_swap(swap_id: str, x_admin_token: Optional[str] = Header(None)):
    controller = _get_controller()
    try:
        record = controller.deactivate(_bytes32(swap_id, "swap_id"), caller=_caller(x_admin_token))
    except SwapError as e:
        raise _http_error(e)
    return record.to_dict()


@router.post("/api/swaps/references")
async def batch_update_references(req: BatchReferenceRequest,
                                  x_admin_token: Optional[str] = Header(None)):
    controller = _get_controller()
    try:
        updated = controller.batch_update_references(
            req.swap_ids, req.object_refs, req.tx_refs, caller=_caller(x_admin_token)
        )
    except SwapError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(400, f"Invalid batch entry: {e}")
    return {
        "updated": ["0x" + i.hex() for i in updated],
        "skipped": len(req.swap_ids) - len(updated),
    }


@router.get("/api/events")
async def get_events(since: int = Query(0, ge=0)):
    """Notification feed. Poll with since=<next> to get new events only."""
    events = _get_controller().events_since(since)
    return {
        "since": since,
        "next": since + len(events),
        "events": [e.to_dict() for e in events],
    }
