"""
Swap record bookkeeping.

The store owns the records; the controller is the only writer.
"""

from .store import SwapRecordStore
from .controller import EscrowLifecycleController

__all__ = ["SwapRecordStore", "EscrowLifecycleController"]
