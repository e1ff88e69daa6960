"""
HTLC primitives for the ETH <-> SUI swap coordinator.

- timelocks: 7-stage schedule, packed into one 256-bit word, plus the
  cross-chain ordering check
- commitment: SHA256 hashlock / secret verification
- evm: escrow factory adapter (web3)
- simulated: in-memory escrow for --simulate runs
"""

from .timelocks import (
    TimelockSchedule, TimelockStage, DEFAULT_SCHEDULE,
    validate, is_valid, pack, unpack, deployed_at, set_deployed_at,
    derive_deadline, deadlines,
)
from .commitment import Commitment, commit, verify, generate_secret, to_bytes32, to_hex
from .evm import EVMEscrow
from .simulated import SimulatedEscrow

__all__ = [
    # Timelocks
    "TimelockSchedule",
    "TimelockStage",
    "DEFAULT_SCHEDULE",
    "validate",
    "is_valid",
    "pack",
    "unpack",
    "deployed_at",
    "set_deployed_at",
    "derive_deadline",
    "deadlines",
    # Commitments
    "Commitment",
    "commit",
    "verify",
    "generate_secret",
    "to_bytes32",
    "to_hex",
    # Escrow adapters
    "EVMEscrow",
    "SimulatedEscrow",
]
