"""
swapcoord - ETH <-> SUI HTLC Swap Coordinator

Keeps one record per in-flight swap so an off-chain relayer can drive
both legs forward safely:
- validates the timelock schedule before any funds are locked
- locks the ETH leg through the escrow factory
- tracks the SUI escrow through relayer-supplied references
- verifies and announces the secret once it is public

Usage:
    from swapcoord import EscrowLifecycleController, SimulatedEscrow, DEFAULT_SCHEDULE
    from swapcoord.orders import create_and_sign_order

    controller = EscrowLifecycleController(SimulatedEscrow(), admin=relayer_address)
    signed, secret = create_and_sign_order(maker_key, weth, "0x2::sui::SUI", ...)
    controller.create(**signed.to_create_kwargs(taker=resolver, safety_deposit=10**15))
"""

from .core import (
    SwapStatus,
    SwapRecord,
    SwapInitiated,
    SecretRevealed,
    SwapError,
    InvalidTimelock,
    SwapAlreadyExists,
    SwapNotFound,
    InsufficientEscrowBalance,
    SecretMismatch,
    ArityMismatch,
    NotAuthorized,
    EscrowError,
    ETH_CHAIN_ID,
    SUI_CHAIN_ID,
)

from .htlc.timelocks import TimelockSchedule, TimelockStage, DEFAULT_SCHEDULE
from .htlc.commitment import Commitment, commit, verify
from .htlc.evm import EVMEscrow
from .htlc.simulated import SimulatedEscrow

from .swap.store import SwapRecordStore
from .swap.controller import EscrowLifecycleController

from .config import CoordinatorConfig

__version__ = "0.1.0"
__all__ = [
    # Core types
    "SwapStatus",
    "SwapRecord",
    "SwapInitiated",
    "SecretRevealed",
    "ETH_CHAIN_ID",
    "SUI_CHAIN_ID",
    # Errors
    "SwapError",
    "InvalidTimelock",
    "SwapAlreadyExists",
    "SwapNotFound",
    "InsufficientEscrowBalance",
    "SecretMismatch",
    "ArityMismatch",
    "NotAuthorized",
    "EscrowError",
    # HTLC
    "TimelockSchedule",
    "TimelockStage",
    "DEFAULT_SCHEDULE",
    "Commitment",
    "commit",
    "verify",
    "EVMEscrow",
    "SimulatedEscrow",
    # Swap
    "SwapRecordStore",
    "EscrowLifecycleController",
    # Config
    "CoordinatorConfig",
]
