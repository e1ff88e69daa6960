#!/usr/bin/env python3
"""
Configuration tests.

Usage:
    python -m unittest tests.test_config
"""

import sys
import os
import unittest
from unittest.mock import patch

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from swapcoord.config import CoordinatorConfig
from swapcoord.htlc.evm import EVMEscrow
from swapcoord.htlc.simulated import SimulatedEscrow


class TestCoordinatorConfig(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = CoordinatorConfig.from_env()
        self.assertEqual(config.chain_id, 31337)
        self.assertEqual(config.port, 8090)
        self.assertFalse(config.simulate)

    @patch.dict(os.environ, {"SWAPCOORD_SIMULATE": "false"}, clear=True)
    def test_missing_factory_is_an_error(self):
        """Without a factory and without simulate there is no escrow to lock funds in."""
        config = CoordinatorConfig.from_env()
        with self.assertRaisesRegex(ValueError, "SWAPCOORD_ESCROW_FACTORY"):
            config.build_escrow()

    @patch.dict(os.environ, {"SWAPCOORD_SIMULATE": "1"}, clear=True)
    def test_simulate_without_factory(self):
        self.assertIsInstance(CoordinatorConfig.from_env().build_escrow(), SimulatedEscrow)

    @patch.dict(os.environ, {
        "SWAPCOORD_RPC_URL": "http://node:8545",
        "SWAPCOORD_CHAIN_ID": "1",
        "SWAPCOORD_ESCROW_FACTORY": "0x5FbDB2315678afecb367f032d93F642f64180aa3",
        "SWAPCOORD_ADMIN_ADDRESS": "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
        "SWAPCOORD_PORT": "9000",
    }, clear=True)
    def test_from_env(self):
        config = CoordinatorConfig.from_env()
        self.assertEqual(config.rpc_url, "http://node:8545")
        self.assertEqual(config.chain_id, 1)
        self.assertEqual(config.port, 9000)

        escrow = config.build_escrow()
        self.assertIsInstance(escrow, EVMEscrow)
        self.assertEqual(escrow.rpc_url, "http://node:8545")
        self.assertEqual(escrow.chain_id, 1)

    @patch.dict(os.environ, {
        "SWAPCOORD_ESCROW_FACTORY": "0x5FbDB2315678afecb367f032d93F642f64180aa3",
        "SWAPCOORD_SIMULATE": "yes",
    }, clear=True)
    def test_simulate_overrides_factory(self):
        config = CoordinatorConfig.from_env()
        self.assertTrue(config.simulate)
        self.assertIsInstance(config.build_escrow(), SimulatedEscrow)


if __name__ == "__main__":
    unittest.main(verbosity=2)
