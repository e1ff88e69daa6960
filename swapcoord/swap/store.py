"""
Swap record store.

Mapping swap_id -> SwapRecord. Records are frozen dataclasses, so a
mutation is always "build a new record and swap it in" under the lock.
Each primitive is atomic for a single id; there are no cross-record
transactions.
"""

import threading
from typing import Callable, Dict, List, Optional

from ..core import SwapRecord


class SwapRecordStore:
    """Owns every SwapRecord. Only the lifecycle controller mutates it."""

    def __init__(self):
        self._records: Dict[bytes, SwapRecord] = {}
        self._lock = threading.Lock()

    def get(self, swap_id: bytes) -> Optional[SwapRecord]:
        with self._lock:
            return self._records.get(swap_id)

    def insert_if_absent(self, swap_id: bytes, record: SwapRecord) -> bool:
        """Insert a new record. Returns False if the id is already taken."""
        with self._lock:
            if swap_id in self._records:
                return False
            self._records[swap_id] = record
            return True

    def update_if_present(
        self,
        swap_id: bytes,
        mutate: Callable[[SwapRecord], SwapRecord]
    ) -> Optional[SwapRecord]:
        """
        Replace a record with mutate(record).

        If mutate raises, the stored record is left untouched and the
        exception propagates.

        Returns:
            The new record, or None if the id is absent
        """
        with self._lock:
            current = self._records.get(swap_id)
            if current is None:
                return None
            updated = mutate(current)
            self._records[swap_id] = updated
            return updated

    def records(self) -> List[SwapRecord]:
        """Snapshot of all records, tombstones included."""
        with self._lock:
            return list(self._records.values())

    def __contains__(self, swap_id: bytes) -> bool:
        with self._lock:
            return swap_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
