"""
In-memory escrow for --simulate runs.

Behaves like EVMEscrow from the coordinator's point of view but never
touches a chain. `shortfall` lets a run pretend the escrow received less
than was sent.
"""

import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from ..errors import EscrowError

log = logging.getLogger(__name__)


@dataclass
class SimulatedLock:
    """One simulated escrow deployment."""
    address: str
    swap_id: bytes
    hashlock: bytes
    timelocks: int
    amount: int
    safety_deposit: int
    taker: str
    balance: int


class SimulatedEscrow:
    """Escrow factory stand-in used by examples and the --simulate server mode."""

    def __init__(self, shortfall: int = 0):
        self.shortfall = shortfall
        self.locks: Dict[str, SimulatedLock] = {}
        self._lock = threading.Lock()

    @staticmethod
    def address_for(swap_id: bytes) -> str:
        return "0x" + hashlib.sha256(b"escrow" + swap_id).hexdigest()[:40]

    def lock(self, swap_id: bytes, hashlock: bytes, timelocks: int,
             amount: int, safety_deposit: int, taker: str = "") -> str:
        address = self.address_for(swap_id)
        with self._lock:
            if address in self.locks:
                raise EscrowError(f"Escrow already deployed at {address}")
            entry = self.locks[address] = SimulatedLock(
                address=address,
                swap_id=swap_id,
                hashlock=hashlock,
                timelocks=timelocks,
                amount=amount,
                safety_deposit=safety_deposit,
                taker=taker,
                balance=max(0, amount + safety_deposit - self.shortfall),
            )
        log.info(f"[SIMULATED] Escrow {address} funded with {entry.balance}")
        return address

    def balance_of(self, address: str) -> int:
        with self._lock:
            entry: Optional[SimulatedLock] = self.locks.get(address)
        return entry.balance if entry else 0
