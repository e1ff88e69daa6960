"""
Escrow lifecycle controller.

Drives the per-swap state machine against the SwapRecordStore:

    ABSENT --create--> ACTIVE --deactivate--> DEACTIVATED (tombstone)

ACTIVE records are enriched by update_reference (relayer's view of the
SUI escrow) and record_secret_reveal (secret seen on either chain).
Completion is not tracked here; the relayer infers it from both escrows
releasing funds.

Every operation either commits or raises synchronously. Notifications
(SwapInitiated, SecretRevealed) are appended to `events` and passed to
the optional callbacks after the store write has committed.
"""

import time
import logging
import threading
from dataclasses import replace
from typing import Callable, List, Optional, Sequence, Set, Union

from ..core import (
    SwapRecord, SwapInitiated, SecretRevealed, MAX_OBJECT_REF,
    InvalidTimelock, SwapAlreadyExists, SwapNotFound,
    InsufficientEscrowBalance, SecretMismatch, ArityMismatch, NotAuthorized,
)
from ..htlc import timelocks
from ..htlc.commitment import Commitment, verify, to_bytes32, to_hex
from ..htlc.timelocks import TimelockSchedule
from .store import SwapRecordStore

log = logging.getLogger(__name__)

Notification = Union[SwapInitiated, SecretRevealed]


def _short(value: bytes) -> str:
    return to_hex(value)[:18] + "..."


def _object_ref(value) -> int:
    ref = int(value)
    if not 0 <= ref <= MAX_OBJECT_REF:
        raise ValueError(f"Object reference {ref} does not fit in 64 bits")
    return ref


class EscrowLifecycleController:
    """
    State machine for HTLC swap records.

    Usage:
        controller = EscrowLifecycleController(escrow, admin="0xRelayer...")
        record = controller.create(swap_id, hashlock, 1_500_000_000_000, asset,
                                   DEFAULT_SCHEDULE, maker=maker, taker=taker,
                                   amount=10**17, safety_deposit=10**15)
        controller.update_reference(swap_id, object_ref, tx_ref, caller=admin)
        controller.record_secret_reveal(swap_id, secret, SUI_CHAIN_ID)
    """

    def __init__(self, escrow, admin: str, store: SwapRecordStore = None,
                 clock: Callable[[], float] = None):
        """
        Args:
            escrow: object with lock(swap_id, hashlock, timelocks, amount,
                safety_deposit, taker=...) and balance_of(handle)
            admin: relayer identity allowed to run administrative operations
            store: record store (a fresh one if omitted)
            clock: returns unix seconds, defaults to time.time
        """
        self.escrow = escrow
        self.admin = admin
        self.store = store or SwapRecordStore()
        self.clock = clock or time.time

        # Ids with a create in flight (escrow lock not yet recorded)
        self._pending: Set[bytes] = set()
        self._create_lock = threading.Lock()

        # Append-only notification log
        self.events: List[Notification] = []
        self._events_lock = threading.Lock()

        # Callbacks
        self.on_swap_initiated: Optional[Callable[[SwapInitiated], None]] = None
        self.on_secret_revealed: Optional[Callable[[SecretRevealed], None]] = None

    # =========================================================================
    # Helpers
    # =========================================================================

    def _now(self) -> int:
        return int(self.clock())

    def _require_admin(self, caller: Optional[str], action: str):
        if not caller or not self.admin or caller.lower() != self.admin.lower():
            log.warning(f"Rejected {action} from {caller!r}: not the relayer")
            raise NotAuthorized(f"{action} is restricted to the relayer")

    def _emit(self, event: Notification):
        with self._events_lock:
            self.events.append(event)

        callback = self.on_swap_initiated if isinstance(event, SwapInitiated) else self.on_secret_revealed
        if callback:
            try:
                callback(event)
            except Exception:
                # The transition is already committed; a broken listener must not undo it
                log.exception(f"{event.name} listener failed for {_short(event.swap_id)}")

    def _update_active(self, swap_id: bytes, mutate: Callable[[SwapRecord], SwapRecord]) -> SwapRecord:
        def apply(record: SwapRecord) -> SwapRecord:
            if not record.active:
                raise SwapNotFound(f"Swap {_short(swap_id)} is deactivated", swap_id)
            return mutate(record)

        updated = self.store.update_if_present(swap_id, apply)
        if updated is None:
            raise SwapNotFound(f"Swap {_short(swap_id)} not found", swap_id)
        return updated

    def events_since(self, index: int = 0) -> List[Notification]:
        with self._events_lock:
            return self.events[index:]

    # =========================================================================
    # Operations
    # =========================================================================

    def create(
        self,
        swap_id,
        hashlock,
        counterparty_amount: int,
        counterparty_asset,
        schedule: Union[TimelockSchedule, Sequence[int]],
        *,
        maker: str = "",
        taker: str = "",
        amount: int = 0,
        safety_deposit: int = 0
    ) -> SwapRecord:
        """
        Lock the ETH leg and open an ACTIVE record.

        Args:
            swap_id: 32-byte id derived from the order terms
            hashlock: SHA256 commitment produced by the order signer
            counterparty_amount: amount expected on the SUI leg
            counterparty_asset: 32-byte id of the SUI asset
            schedule: TimelockSchedule or its 7-tuple
            maker, taker: parties of the ETH leg
            amount, safety_deposit: wei locked in the ETH escrow

        Raises:
            SwapAlreadyExists, InvalidTimelock, InsufficientEscrowBalance
        """
        swap_id = to_bytes32(swap_id)
        hashlock = to_bytes32(hashlock)
        counterparty_asset = to_bytes32(counterparty_asset)

        if amount < 0 or safety_deposit < 0 or counterparty_amount < 0:
            raise ValueError("Amounts must be non-negative")

        self._claim(swap_id)
        try:
            record = self._lock_and_insert(
                swap_id, hashlock, counterparty_amount, counterparty_asset, schedule,
                maker, taker, amount, safety_deposit,
            )
        finally:
            with self._create_lock:
                self._pending.discard(swap_id)

        log.info(f"Swap initiated: {_short(swap_id)}, escrow={record.escrow}, "
                 f"amount={amount}, counterparty_amount={counterparty_amount}")

        self._emit(SwapInitiated(
            swap_id=swap_id,
            hashlock=hashlock,
            maker=maker,
            taker=taker,
            amount=amount,
            safety_deposit=safety_deposit,
            counterparty_amount=counterparty_amount,
            counterparty_asset=counterparty_asset,
        ))
        return record

    def _claim(self, swap_id: bytes):
        """Reserve an id for one create; concurrent creates for it fail fast."""
        with self._create_lock:
            if swap_id in self.store or swap_id in self._pending:
                log.warning(f"Duplicate create for {_short(swap_id)}")
                raise SwapAlreadyExists(f"Swap {_short(swap_id)} already exists", swap_id)
            self._pending.add(swap_id)

    def _lock_and_insert(self, swap_id: bytes, hashlock: bytes, counterparty_amount: int,
                         counterparty_asset: bytes, schedule, maker: str, taker: str,
                         amount: int, safety_deposit: int) -> SwapRecord:
        if not isinstance(schedule, TimelockSchedule):
            try:
                schedule = TimelockSchedule.from_tuple(schedule)
            except (TypeError, ValueError) as e:
                raise InvalidTimelock(str(e), swap_id) from e
        try:
            timelocks.validate(schedule)
        except InvalidTimelock as e:
            log.warning(f"Invalid schedule for {_short(swap_id)}: {e}")
            e.swap_id = swap_id
            raise

        now = self._now()
        packed = timelocks.pack(schedule, deployed_at=now)

        handle = self.escrow.lock(swap_id, hashlock, packed, amount, safety_deposit, taker=taker)
        balance = self.escrow.balance_of(handle)
        required = amount + safety_deposit
        if balance < required:
            log.warning(f"Escrow {handle} for {_short(swap_id)} holds {balance}, need {required}")
            raise InsufficientEscrowBalance(
                f"Escrow holds {balance}, declared amount + safety deposit is {required}", swap_id
            )

        record = SwapRecord(
            swap_id=swap_id,
            active=True,
            commitment=Commitment(hashlock=hashlock),
            counterparty_amount=counterparty_amount,
            counterparty_asset=counterparty_asset,
            schedule=schedule,
            timelocks=packed,
            created_at=now,
            maker=maker,
            taker=taker,
            amount=amount,
            safety_deposit=safety_deposit,
            escrow=handle,
            updated_at=now,
        )
        if not self.store.insert_if_absent(swap_id, record):
            raise SwapAlreadyExists(f"Swap {_short(swap_id)} already exists", swap_id)
        return record

    def update_reference(self, swap_id, counterparty_object_ref: int, counterparty_tx_ref,
                         *, caller: Optional[str]) -> SwapRecord:
        """
        Record the relayer's view of the SUI escrow. Idempotent.

        Raises:
            NotAuthorized, SwapNotFound
        """
        self._require_admin(caller, "update_reference")
        swap_id = to_bytes32(swap_id)
        record = self._set_reference(swap_id, _object_ref(counterparty_object_ref),
                                     to_bytes32(counterparty_tx_ref))
        log.info(f"Reference updated: {_short(swap_id)} -> object={record.counterparty_object_ref}, "
                 f"tx={_short(record.counterparty_tx_ref)}")
        return record

    def _set_reference(self, swap_id: bytes, object_ref: int, tx_ref: bytes) -> SwapRecord:
        now = self._now()

        def mutate(record: SwapRecord) -> SwapRecord:
            if record.counterparty_object_ref == object_ref and record.counterparty_tx_ref == tx_ref:
                return record
            return replace(record, counterparty_object_ref=object_ref,
                           counterparty_tx_ref=tx_ref, updated_at=now)

        return self._update_active(swap_id, mutate)

    def record_secret_reveal(self, swap_id, secret, reveal_chain_id: int) -> SwapRecord:
        """
        Record a secret observed on either chain and announce it.

        The secret is checked against the stored hashlock before anything
        is written or emitted.

        Raises:
            SwapNotFound, SecretMismatch
        """
        swap_id = to_bytes32(swap_id)
        candidate = to_bytes32(secret) if isinstance(secret, str) else bytes(secret)
        now = self._now()

        def mutate(record: SwapRecord) -> SwapRecord:
            if not verify(record.commitment, candidate):
                raise SecretMismatch(f"Secret does not open hashlock of {_short(swap_id)}", swap_id)
            return replace(
                record,
                commitment=Commitment(hashlock=record.commitment.hashlock, secret=candidate),
                revealed_on=record.revealed_on if record.revealed_on is not None else reveal_chain_id,
                updated_at=now,
            )

        try:
            record = self._update_active(swap_id, mutate)
        except SecretMismatch:
            log.warning(f"Rejected secret reveal for {_short(swap_id)} on chain {reveal_chain_id}")
            raise

        log.info(f"Secret revealed for {_short(swap_id)} on chain {reveal_chain_id}: "
                 f"{candidate.hex()[:16]}...")
        self._emit(SecretRevealed(swap_id=swap_id, secret=candidate, reveal_chain_id=reveal_chain_id))
        return record

    def deactivate(self, swap_id, *, caller: Optional[str]) -> SwapRecord:
        """
        Emergency tombstone. Never moves funds and never deletes the record.

        Raises:
            NotAuthorized, SwapNotFound
        """
        self._require_admin(caller, "deactivate")
        swap_id = to_bytes32(swap_id)
        now = self._now()

        def mutate(record: SwapRecord) -> SwapRecord:
            if not record.active:
                return record
            return replace(record, active=False, updated_at=now)

        record = self.store.update_if_present(swap_id, mutate)
        if record is None:
            raise SwapNotFound(f"Swap {_short(swap_id)} not found", swap_id)
        log.info(f"Swap deactivated: {_short(swap_id)}")
        return record

    def batch_update_references(self, swap_ids: Sequence, object_refs: Sequence[int],
                                tx_refs: Sequence, *, caller: Optional[str]) -> List[bytes]:
        """
        Apply many reference updates. Absent or deactivated ids are skipped
        so one stale entry cannot abort the rest.

        Returns:
            Ids that were updated, in input order

        Raises:
            NotAuthorized, ArityMismatch (before any entry is processed)
        """
        self._require_admin(caller, "batch_update_references")
        if not (len(swap_ids) == len(object_refs) == len(tx_refs)):
            raise ArityMismatch(
                f"Batch lengths differ: ids={len(swap_ids)}, "
                f"object_refs={len(object_refs)}, tx_refs={len(tx_refs)}"
            )

        entries = [
            (to_bytes32(i), _object_ref(o), to_bytes32(t))
            for i, o, t in zip(swap_ids, object_refs, tx_refs)
        ]

        updated = []
        for swap_id, object_ref, tx_ref in entries:
            try:
                self._set_reference(swap_id, object_ref, tx_ref)
            except SwapNotFound:
                log.debug(f"Batch skip: {_short(swap_id)} absent or deactivated")
                continue
            updated.append(swap_id)

        log.info(f"Batch reference update: {len(updated)}/{len(entries)} applied")
        return updated

    def get_record(self, swap_id) -> Optional[SwapRecord]:
        """Read-only lookup, tombstones included."""
        return self.store.get(to_bytes32(swap_id))

    def get_active_swaps(self) -> List[SwapRecord]:
        return [r for r in self.store.records() if r.active]
