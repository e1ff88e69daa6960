"""
Coordinator configuration, read from SWAPCOORD_* environment variables.
"""

import os
from dataclasses import dataclass

from .core import SUI_CHAIN_ID
from .htlc.evm import RPC_URL, CHAIN_ID


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class CoordinatorConfig:
    """Coordinator configuration."""
    # ETH leg
    rpc_url: str = RPC_URL
    chain_id: int = CHAIN_ID
    escrow_factory: str = ""
    private_key: str = ""       # Signs createEscrow transactions

    # Relayer identity (administrative caller)
    admin_address: str = ""
    admin_token: str = ""       # Shared secret presented as X-Admin-Token

    # SUI leg
    sui_chain_id: int = SUI_CHAIN_ID

    # Use SimulatedEscrow instead of the chain
    simulate: bool = False

    # HTTP
    host: str = "0.0.0.0"
    port: int = 8090

    @classmethod
    def from_env(cls) -> "CoordinatorConfig":
        return cls(
            rpc_url=os.environ.get("SWAPCOORD_RPC_URL", RPC_URL),
            chain_id=int(os.environ.get("SWAPCOORD_CHAIN_ID", CHAIN_ID)),
            escrow_factory=os.environ.get("SWAPCOORD_ESCROW_FACTORY", ""),
            private_key=os.environ.get("SWAPCOORD_PRIVATE_KEY", ""),
            admin_address=os.environ.get("SWAPCOORD_ADMIN_ADDRESS", ""),
            admin_token=os.environ.get("SWAPCOORD_ADMIN_TOKEN", ""),
            sui_chain_id=int(os.environ.get("SWAPCOORD_SUI_CHAIN_ID", SUI_CHAIN_ID)),
            simulate=_env_bool("SWAPCOORD_SIMULATE", False),
            host=os.environ.get("SWAPCOORD_HOST", "0.0.0.0"),
            port=int(os.environ.get("SWAPCOORD_PORT", 8090)),
        )

    def build_escrow(self):
        """
        Escrow adapter for this configuration.

        Raises:
            ValueError: no escrow factory configured and simulate is off
        """
        if self.simulate:
            from .htlc.simulated import SimulatedEscrow
            return SimulatedEscrow()
        if not self.escrow_factory:
            raise ValueError("SWAPCOORD_ESCROW_FACTORY is not set (use SWAPCOORD_SIMULATE=1 for an in-memory escrow)")
        from .htlc.evm import EVMEscrow
        return EVMEscrow(
            factory_address=self.escrow_factory,
            private_key=self.private_key,
            rpc_url=self.rpc_url,
            chain_id=self.chain_id,
        )
