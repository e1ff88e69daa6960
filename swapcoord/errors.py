"""
Error kinds reported by the coordinator.

None of these are retried by the core; retry, if any, is relayer policy.
"""

from typing import Optional


class SwapError(Exception):
    """Base class for every error the coordinator reports to its caller."""
    code = "swap_error"

    def __init__(self, message: str, swap_id: Optional[bytes] = None):
        super().__init__(message)
        self.swap_id = swap_id


class InvalidTimelock(SwapError):
    """Schedule violates the ordering invariants."""
    code = "invalid_timelock"


class SwapAlreadyExists(SwapError):
    """Duplicate identifier on create."""
    code = "swap_already_exists"


class SwapNotFound(SwapError):
    """Operation targets an absent or deactivated record."""
    code = "swap_not_found"


class InsufficientEscrowBalance(SwapError):
    """External escrow did not receive the declared funds."""
    code = "insufficient_escrow_balance"


class SecretMismatch(SwapError):
    """Disclosed secret does not hash to the stored hashlock."""
    code = "secret_mismatch"


class ArityMismatch(SwapError):
    """Batch input sequences have different lengths."""
    code = "arity_mismatch"


class NotAuthorized(SwapError):
    """Administrative operation called by someone other than the relayer."""
    code = "not_authorized"


class EscrowError(RuntimeError):
    """Escrow adapter failure (RPC error, reverted transaction)."""
