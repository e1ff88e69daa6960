"""
Core types and errors for the swapcoord SDK.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .htlc.commitment import Commitment, to_hex
from .htlc.timelocks import TimelockSchedule
from .errors import (  # noqa: F401
    SwapError, InvalidTimelock, SwapAlreadyExists, SwapNotFound,
    InsufficientEscrowBalance, SecretMismatch, ArityMismatch,
    NotAuthorized, EscrowError,
)


class SwapStatus(Enum):
    """Swap record lifecycle states."""
    ABSENT = "absent"           # No record for this id
    ACTIVE = "active"           # Escrow locked, relayer driving the swap
    DEACTIVATED = "deactivated" # Tombstone, kept for audit


# =============================================================================
# Records
# =============================================================================

@dataclass(frozen=True)
class SwapRecord:
    """One in-flight swap, keyed by swap_id in the SwapRecordStore."""
    swap_id: bytes
    active: bool
    commitment: Commitment
    counterparty_amount: int
    counterparty_asset: bytes       # opaque 32-byte identifier
    schedule: TimelockSchedule
    timelocks: int                  # packed schedule incl. deployment time
    created_at: int

    # Counterparty chain references (relayer supplied, never verified)
    counterparty_tx_ref: Optional[bytes] = None
    counterparty_object_ref: Optional[int] = None

    # Local leg
    maker: str = ""
    taker: str = ""
    amount: int = 0
    safety_deposit: int = 0
    escrow: Optional[str] = None

    # Reveal bookkeeping
    revealed_on: Optional[int] = None
    updated_at: int = 0

    @property
    def hashlock(self) -> bytes:
        return self.commitment.hashlock

    @property
    def status(self) -> SwapStatus:
        return SwapStatus.ACTIVE if self.active else SwapStatus.DEACTIVATED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "swap_id": to_hex(self.swap_id),
            "status": self.status.value,
            "active": self.active,
            "hashlock": to_hex(self.commitment.hashlock),
            "secret": to_hex(self.commitment.secret) if self.commitment.secret else None,
            "revealed_on": self.revealed_on,
            "maker": self.maker,
            "taker": self.taker,
            "amount": self.amount,
            "safety_deposit": self.safety_deposit,
            "escrow": self.escrow,
            "counterparty_amount": self.counterparty_amount,
            "counterparty_asset": to_hex(self.counterparty_asset),
            "counterparty_tx_ref": to_hex(self.counterparty_tx_ref) if self.counterparty_tx_ref else None,
            "counterparty_object_ref": self.counterparty_object_ref,
            "schedule": self.schedule.to_dict(),
            "timelocks": hex(self.timelocks),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# =============================================================================
# Notifications
# =============================================================================

@dataclass(frozen=True)
class SwapInitiated:
    """Emitted on create. The relayer starts watching the counterparty chain."""
    swap_id: bytes
    hashlock: bytes
    maker: str
    taker: str
    amount: int
    safety_deposit: int
    counterparty_amount: int
    counterparty_asset: bytes
    name: str = field(default="SwapInitiated", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "swap_id": to_hex(self.swap_id),
            "hashlock": to_hex(self.hashlock),
            "maker": self.maker,
            "taker": self.taker,
            "amount": self.amount,
            "safety_deposit": self.safety_deposit,
            "counterparty_amount": self.counterparty_amount,
            "counterparty_asset": to_hex(self.counterparty_asset),
        }


@dataclass(frozen=True)
class SecretRevealed:
    """Emitted once a verified secret is public on either chain."""
    swap_id: bytes
    secret: bytes
    reveal_chain_id: int
    name: str = field(default="SecretRevealed", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "swap_id": to_hex(self.swap_id),
            "secret": to_hex(self.secret),
            "reveal_chain_id": self.reveal_chain_id,
        }


# =============================================================================
# Constants
# =============================================================================

# Chain tags for reveal_chain_id (Sui has no numeric chain id, 101 is ours)
ETH_CHAIN_ID = 1
SUI_CHAIN_ID = 101

MAX_OBJECT_REF = 2**64 - 1
