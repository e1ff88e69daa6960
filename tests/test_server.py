#!/usr/bin/env python3
"""
HTTP route tests for the swap endpoints (FastAPI TestClient).

Usage:
    python -m unittest tests.test_server
"""

import sys
import os
import unittest

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fastapi import FastAPI
from fastapi.testclient import TestClient

from swapcoord.htlc.commitment import generate_secret
from swapcoord.htlc.simulated import SimulatedEscrow
from swapcoord.swap.controller import EscrowLifecycleController
from routes import swaps as swap_routes

ADMIN = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
TOKEN = "relayer-token"
AUTH = {"X-Admin-Token": TOKEN}


def hex32(n: int) -> str:
    return "0x" + (bytes([n]) * 32).hex()


class TestSwapRoutes(unittest.TestCase):

    def setUp(self):
        self.escrow = SimulatedEscrow()
        self.controller = EscrowLifecycleController(self.escrow, admin=ADMIN)
        swap_routes.configure(self.controller, admin_token=TOKEN)

        app = FastAPI()
        app.include_router(swap_routes.router)
        self.client = TestClient(app)

        self.secret, self.hashlock = generate_secret()

    def tearDown(self):
        swap_routes.configure(None)

    def create(self, n: int = 1, **overrides):
        body = {
            "swap_id": hex32(n),
            "hashlock": "0x" + self.hashlock.hex(),
            "counterparty_amount": 1_500_000_000_000,
            "counterparty_asset": hex32(0x51),
            "amount": 10**17,
            "safety_deposit": 10**15,
        }
        body.update(overrides)
        return self.client.post("/api/swap/create", json=body)

    def test_create_and_get(self):
        resp = self.create()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "active")

        resp = self.client.get(f"/api/swap/{hex32(1)}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["hashlock"], "0x" + self.hashlock.hex())
        self.assertEqual(resp.json()["schedule"]["sui_cancellation"], 90000)

    def test_duplicate_create_conflict(self):
        self.create()
        resp = self.create()
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"]["error"], "swap_already_exists")

    def test_invalid_schedule(self):
        resp = self.create(schedule=[3600, 7200, 86400, 172800, 90000, 95000, 100000])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"]["error"], "invalid_timelock")

    def test_underfunded_escrow(self):
        self.escrow.shortfall = 1
        resp = self.create()
        self.assertEqual(resp.status_code, 402)
        self.assertEqual(self.client.get(f"/api/swap/{hex32(1)}").status_code, 404)

    def test_bad_hex_rejected(self):
        resp = self.create(swap_id="0x1234")
        self.assertEqual(resp.status_code, 400)

    def test_reference_requires_token(self):
        self.create()
        body = {"object_ref": 42, "tx_ref": hex32(0xAA)}

        resp = self.client.post(f"/api/swap/{hex32(1)}/reference", json=body)
        self.assertEqual(resp.status_code, 403)

        resp = self.client.post(f"/api/swap/{hex32(1)}/reference", json=body,
                                headers={"X-Admin-Token": "wrong"})
        self.assertEqual(resp.status_code, 403)

        resp = self.client.post(f"/api/swap/{hex32(1)}/reference", json=body, headers=AUTH)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["counterparty_object_ref"], 42)

    def test_reveal(self):
        self.create()
        resp = self.client.post(f"/api/swap/{hex32(1)}/reveal",
                                json={"secret": "0x" + os.urandom(32).hex(), "chain_id": 101})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"]["error"], "secret_mismatch")

        resp = self.client.post(f"/api/swap/{hex32(1)}/reveal",
                                json={"secret": "0x" + self.secret.hex(), "chain_id": 101})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["secret"], "0x" + self.secret.hex())
        self.assertEqual(resp.json()["revealed_on"], 101)

    def test_deactivate_then_list(self):
        self.create(1)
        self.create(2)
        resp = self.client.post(f"/api/swap/{hex32(1)}/deactivate", headers=AUTH)
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["active"])

        self.assertEqual(self.client.get("/api/swaps").json()["count"], 2)
        active = self.client.get("/api/swaps", params={"active_only": True}).json()
        self.assertEqual(active["count"], 1)
        self.assertEqual(active["swaps"][0]["swap_id"], hex32(2))

        resp = self.client.post(f"/api/swap/{hex32(1)}/reveal",
                                json={"secret": "0x" + self.secret.hex(), "chain_id": 1})
        self.assertEqual(resp.status_code, 404)

    def test_batch_references(self):
        self.create(1)
        self.create(3)
        body = {
            "swap_ids": [hex32(1), hex32(2), hex32(3)],
            "object_refs": [1, 2, 3],
            "tx_refs": [hex32(0xA1), hex32(0xA2), hex32(0xA3)],
        }
        resp = self.client.post("/api/swaps/references", json=body, headers=AUTH)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"updated": [hex32(1), hex32(3)], "skipped": 1})

        body["object_refs"] = [1, 2]
        resp = self.client.post("/api/swaps/references", json=body, headers=AUTH)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"]["error"], "arity_mismatch")

    def test_events_feed(self):
        self.create()
        self.client.post(f"/api/swap/{hex32(1)}/reveal",
                         json={"secret": "0x" + self.secret.hex(), "chain_id": 101})

        feed = self.client.get("/api/events").json()
        self.assertEqual(feed["next"], 2)
        self.assertEqual([e["event"] for e in feed["events"]], ["SwapInitiated", "SecretRevealed"])

        feed = self.client.get("/api/events", params={"since": 1}).json()
        self.assertEqual(len(feed["events"]), 1)
        self.assertEqual(feed["events"][0]["secret"], "0x" + self.secret.hex())

    def test_unconfigured_router(self):
        swap_routes.configure(None)
        self.assertEqual(self.client.get("/api/swaps").status_code, 503)


if __name__ == "__main__":
    unittest.main(verbosity=2)
