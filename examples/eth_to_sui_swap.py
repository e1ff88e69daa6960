#!/usr/bin/env python3
"""
Example: ETH -> SUI Atomic Swap

Walks one swap through the coordinator from the relayer's side:

1. Maker signs an order embedding SHA256(secret)
2. Coordinator validates the timelocks and locks the ETH escrow
3. Relayer sees SwapInitiated, resolver locks the SUI escrow
4. Relayer records the SUI escrow object / tx references
5. Maker reveals the secret on SUI, relayer records it
6. SecretRevealed lets the resolver withdraw on ETH before the window closes

Usage:
    python eth_to_sui_swap.py [--simulate]

    --simulate: use the in-memory escrow (otherwise SWAPCOORD_ESCROW_FACTORY
                and SWAPCOORD_PRIVATE_KEY must point at a chain)
"""

import sys
import logging
import secrets
from pathlib import Path

# Add package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from swapcoord.config import CoordinatorConfig
from swapcoord.core import SUI_CHAIN_ID
from swapcoord.htlc import timelocks
from swapcoord.orders import create_and_sign_order, recover_signer
from swapcoord.swap.controller import EscrowLifecycleController

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s'
)
log = logging.getLogger(__name__)

# Anvil default accounts
MAKER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
RELAYER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
RESOLVER = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
LOP = "0x111111125421cA6dc452d289314280a0f8842A65"
SUI_COIN = "0x2::sui::SUI"


def main():
    config = CoordinatorConfig.from_env()
    if "--simulate" in sys.argv:
        config.simulate = True

    controller = EscrowLifecycleController(config.build_escrow(), admin=RELAYER)

    # =================================================================
    # 1. Maker signs the order
    # =================================================================
    signed, secret = create_and_sign_order(
        MAKER_KEY, WETH, SUI_COIN,
        making_amount=10**17,               # 0.1 ETH
        taking_amount=1_500_000_000_000,    # 1500 SUI (9 decimals)
        chain_id=config.chain_id,
        verifying_contract=LOP,
    )
    log.info(f"Order signer: {recover_signer(signed)}")

    # =================================================================
    # 2. Lock ETH leg
    # =================================================================
    record = controller.create(**signed.to_create_kwargs(taker=RESOLVER, safety_deposit=10**15))
    for stage, deadline in timelocks.deadlines(record.timelocks).items():
        log.info(f"  {stage.name:<24} {deadline}")

    # =================================================================
    # 3-4. Relayer confirms the SUI escrow
    # =================================================================
    object_ref = secrets.randbits(64)
    tx_digest = secrets.token_bytes(32)
    controller.update_reference(record.swap_id, object_ref, tx_digest, caller=RELAYER)

    # =================================================================
    # 5-6. Secret goes public on SUI
    # =================================================================
    controller.record_secret_reveal(record.swap_id, secret, SUI_CHAIN_ID)

    for event in controller.events:
        log.info(f"Event: {event.to_dict()}")

    final = controller.get_record(record.swap_id)
    log.info(f"Final record: {final.to_dict()}")


if __name__ == "__main__":
    main()
