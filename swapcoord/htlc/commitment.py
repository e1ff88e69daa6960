"""
Hashlock commitments.

hashlock = SHA256(secret), secret is 32 random bytes. SHA256 (not keccak)
so the same hashlock can be checked on both legs.

The coordinator only stores and verifies hashlocks. Secrets are generated
by the order signer (see swapcoord.orders) before any record exists.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple, Union

SECRET_SIZE = 32

HexOrBytes = Union[str, bytes, bytearray]


@dataclass(frozen=True)
class Commitment:
    """A hashlock and, once disclosed, the secret behind it."""
    hashlock: bytes
    secret: Optional[bytes] = None

    @property
    def revealed(self) -> bool:
        return self.secret is not None


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def generate_secret() -> Tuple[bytes, bytes]:
    """
    Generate a random secret and its SHA256 hashlock.

    Returns:
        (secret, hashlock)
    """
    secret = secrets.token_bytes(SECRET_SIZE)
    return secret, sha256(secret)


def commit(secret: bytes) -> Commitment:
    """Build the commitment for a 32-byte secret."""
    if not isinstance(secret, (bytes, bytearray)) or len(secret) != SECRET_SIZE:
        raise ValueError(f"Secret must be exactly {SECRET_SIZE} bytes")
    return Commitment(hashlock=sha256(bytes(secret)))


def verify(commitment: Union[Commitment, bytes], candidate: bytes) -> bool:
    """
    Check SHA256(candidate) == hashlock.

    Args:
        commitment: Commitment or raw 32-byte hashlock
        candidate: disclosed secret

    Returns:
        True if the candidate opens the commitment
    """
    hashlock = commitment.hashlock if isinstance(commitment, Commitment) else commitment
    if not isinstance(candidate, (bytes, bytearray)) or len(candidate) != SECRET_SIZE:
        return False
    if not isinstance(hashlock, (bytes, bytearray)) or len(hashlock) != SECRET_SIZE:
        return False
    return hmac.compare_digest(sha256(bytes(candidate)), bytes(hashlock))


# =============================================================================
# Hex helpers
# =============================================================================

def to_bytes32(value: HexOrBytes) -> bytes:
    """Accept 0x-prefixed hex, bare hex or raw bytes; return 32 bytes."""
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    else:
        text = value[2:] if value.startswith(("0x", "0X")) else value
        if len(text) != 64:
            raise ValueError(f"bytes32 must be 64 hex chars, got {len(text)}")
        raw = bytes.fromhex(text)
    if len(raw) != 32:
        raise ValueError(f"bytes32 must be 32 bytes, got {len(raw)}")
    return raw


def to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()
