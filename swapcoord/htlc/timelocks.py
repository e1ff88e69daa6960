"""
Timelock schedule codec for ETH <-> SUI swaps.

A schedule is seven durations (seconds) measured from the moment the
escrow is deployed. They are packed into one 256-bit word so the escrow
contract can store them in a single slot:

    bits   0..31   eth_withdrawal
    bits  32..63   eth_public_withdrawal
    bits  64..95   eth_cancellation
    bits  96..127  eth_public_cancellation
    bits 128..159  sui_withdrawal
    bits 160..191  sui_public_withdrawal
    bits 192..223  sui_cancellation
    bits 224..255  deployed_at (unix seconds)

Safety invariants (checked by validate(), never by pack/unpack):
    eth: withdrawal < public_withdrawal < cancellation < public_cancellation
    sui: withdrawal < public_withdrawal < cancellation
    sui_withdrawal < eth_cancellation   (no withdraw-on-one, refund-on-other)
    eth_withdrawal < sui_cancellation   (mirrored race)
"""

from enum import IntEnum
from dataclasses import dataclass, fields, astuple
from typing import Dict, Tuple

from ..errors import InvalidTimelock

FIELD_BITS = 32
FIELD_MASK = (1 << FIELD_BITS) - 1
DEPLOYED_AT_OFFSET = 224


class TimelockStage(IntEnum):
    """Stage index == field position in the packed word."""
    ETH_WITHDRAWAL = 0
    ETH_PUBLIC_WITHDRAWAL = 1
    ETH_CANCELLATION = 2
    ETH_PUBLIC_CANCELLATION = 3
    SUI_WITHDRAWAL = 4
    SUI_PUBLIC_WITHDRAWAL = 5
    SUI_CANCELLATION = 6

    @property
    def offset(self) -> int:
        return int(self) * FIELD_BITS


@dataclass(frozen=True)
class TimelockSchedule:
    """Seven relative deadlines, in seconds after deployment."""
    eth_withdrawal: int
    eth_public_withdrawal: int
    eth_cancellation: int
    eth_public_cancellation: int
    sui_withdrawal: int
    sui_public_withdrawal: int
    sui_cancellation: int

    @classmethod
    def from_tuple(cls, values) -> "TimelockSchedule":
        values = tuple(values)
        if len(values) != len(TimelockStage):
            raise ValueError(f"Timelock schedule needs {len(TimelockStage)} values, got {len(values)}")
        return cls(*values)

    def get(self, stage: TimelockStage) -> int:
        return astuple(self)[stage]

    def to_tuple(self) -> Tuple[int, ...]:
        return astuple(self)

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# Documented safe default: 1h/2h/24h/48h on ETH, 30m/1.5h/25h on SUI
DEFAULT_SCHEDULE = TimelockSchedule.from_tuple((3600, 7200, 86400, 172800, 1800, 5400, 90000))


def validate(schedule: TimelockSchedule) -> None:
    """
    Check a schedule against the cross-chain safety ordering.

    Raises:
        InvalidTimelock: on the first violated rule. Nothing is written
        anywhere, this is a pure check.
    """
    for f in fields(schedule):
        value = getattr(schedule, f.name)
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= FIELD_MASK:
            raise InvalidTimelock(f"{f.name}={value!r} is not an unsigned 32-bit value")

    s = schedule
    if not (s.eth_withdrawal < s.eth_public_withdrawal < s.eth_cancellation < s.eth_public_cancellation):
        raise InvalidTimelock(
            f"ETH stages out of order: withdrawal={s.eth_withdrawal}, "
            f"public_withdrawal={s.eth_public_withdrawal}, cancellation={s.eth_cancellation}, "
            f"public_cancellation={s.eth_public_cancellation}"
        )
    if not (s.sui_withdrawal < s.sui_public_withdrawal < s.sui_cancellation):
        raise InvalidTimelock(
            f"SUI stages out of order: withdrawal={s.sui_withdrawal}, "
            f"public_withdrawal={s.sui_public_withdrawal}, cancellation={s.sui_cancellation}"
        )
    if not s.sui_withdrawal < s.eth_cancellation:
        raise InvalidTimelock(
            f"sui_withdrawal={s.sui_withdrawal}s must be before eth_cancellation={s.eth_cancellation}s"
        )
    if not s.eth_withdrawal < s.sui_cancellation:
        raise InvalidTimelock(
            f"eth_withdrawal={s.eth_withdrawal}s must be before sui_cancellation={s.sui_cancellation}s"
        )


def is_valid(schedule: TimelockSchedule) -> bool:
    try:
        validate(schedule)
    except InvalidTimelock:
        return False
    return True


# =============================================================================
# Encode / decode
# =============================================================================

def _check_width(name: str, value: int):
    if not 0 <= value <= FIELD_MASK:
        raise ValueError(f"{name}={value} does not fit in {FIELD_BITS} bits")


def pack(schedule: TimelockSchedule, deployed_at: int = 0) -> int:
    """Encode a schedule (and optional deployment time) into one word."""
    word = 0
    for stage in TimelockStage:
        value = schedule.get(stage)
        _check_width(stage.name.lower(), value)
        word |= value << stage.offset
    return set_deployed_at(word, deployed_at)


def unpack(word: int) -> TimelockSchedule:
    """Decode the seven offsets. The deployment time is ignored."""
    return TimelockSchedule.from_tuple(
        (word >> stage.offset) & FIELD_MASK for stage in TimelockStage
    )


def deployed_at(word: int) -> int:
    return (word >> DEPLOYED_AT_OFFSET) & FIELD_MASK


def set_deployed_at(word: int, timestamp: int) -> int:
    _check_width("deployed_at", timestamp)
    word &= ~(FIELD_MASK << DEPLOYED_AT_OFFSET)
    return word | (timestamp << DEPLOYED_AT_OFFSET)


def derive_deadline(word: int, deployed: int, stage: TimelockStage) -> int:
    """Absolute deadline (unix seconds) for one stage."""
    return deployed + ((word >> TimelockStage(stage).offset) & FIELD_MASK)


def deadlines(word: int) -> Dict[TimelockStage, int]:
    """All absolute deadlines, using the deployment time stored in the word."""
    start = deployed_at(word)
    return {stage: derive_deadline(word, start, stage) for stage in TimelockStage}
