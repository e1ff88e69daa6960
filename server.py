#!/usr/bin/env python3
"""
swapcoord Server
ETH <-> SUI HTLC swap coordination for the relayer.

Endpoints:
  GET  /api/status                      - Health check
  POST /api/swap/create                 - Lock ETH leg, open swap record
  GET  /api/swap/{id}                   - Get swap record
  GET  /api/swaps                       - List swap records
  POST /api/swap/{id}/reference         - Relayer: record SUI escrow refs
  POST /api/swap/{id}/reveal            - Record a public secret
  POST /api/swap/{id}/deactivate        - Relayer: tombstone a swap
  POST /api/swaps/references            - Relayer: batch reference update
  GET  /api/events?since=N              - SwapInitiated / SecretRevealed feed

Configuration: SWAPCOORD_* environment variables (see swapcoord.config).
"""

import time
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swapcoord import __version__
from swapcoord.config import CoordinatorConfig
from swapcoord.swap.controller import EscrowLifecycleController
from routes import swaps as swap_routes

# =============================================================================
# LOGGING
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s'
)
log = logging.getLogger(__name__)

# =============================================================================
# CONFIGURATION
# =============================================================================

CONFIG = CoordinatorConfig.from_env()


def build_controller(config: CoordinatorConfig) -> EscrowLifecycleController:
    escrow = config.build_escrow()
    controller = EscrowLifecycleController(escrow, admin=config.admin_address)

    controller.on_swap_initiated = lambda ev: log.info(
        f"SwapInitiated 0x{ev.swap_id.hex()[:16]}... maker={ev.maker} "
        f"amount={ev.amount} counterparty_amount={ev.counterparty_amount}"
    )
    controller.on_secret_revealed = lambda ev: log.info(
        f"SecretRevealed 0x{ev.swap_id.hex()[:16]}... on chain {ev.reveal_chain_id}"
    )
    return controller


controller = build_controller(CONFIG)
swap_routes.configure(controller, admin_token=CONFIG.admin_token)

# =============================================================================
# APP SETUP
# =============================================================================

app = FastAPI(
    title="swapcoord",
    description="ETH <-> SUI HTLC swap coordinator",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(swap_routes.router)


@app.get("/api/status")
async def get_status():
    """Health check."""
    records = controller.store.records()
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": int(time.time()),
        "simulate": CONFIG.simulate,
        "chain_id": CONFIG.chain_id,
        "sui_chain_id": CONFIG.sui_chain_id,
        "swaps_active": len([r for r in records if r.active]),
        "swaps_total": len(records),
        "events_total": len(controller.events),
    }


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    if not CONFIG.admin_address or not CONFIG.admin_token:
        log.warning("SWAPCOORD_ADMIN_ADDRESS / SWAPCOORD_ADMIN_TOKEN not set - relayer endpoints will reject")
    log.info(f"Starting swapcoord on port {CONFIG.port}")
    log.info(f"Docs: http://{CONFIG.host}:{CONFIG.port}/docs")
    uvicorn.run(app, host=CONFIG.host, port=CONFIG.port)
