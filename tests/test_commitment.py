#!/usr/bin/env python3
"""
Hashlock commitment tests.

Usage:
    python -m unittest tests.test_commitment
"""

import sys
import os
import hashlib
import unittest

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from swapcoord.htlc.commitment import (
    Commitment, commit, verify, generate_secret, sha256, to_bytes32, to_hex,
)


class TestCommit(unittest.TestCase):

    def test_hashlock_is_sha256(self):
        secret = bytes(range(32))
        self.assertEqual(commit(secret).hashlock, hashlib.sha256(secret).digest())

    def test_commitment_starts_unrevealed(self):
        c = commit(os.urandom(32))
        self.assertIsNone(c.secret)
        self.assertFalse(c.revealed)

    def test_secret_must_be_32_bytes(self):
        for bad in (b"", os.urandom(31), os.urandom(33), "00" * 32):
            with self.assertRaises(ValueError):
                commit(bad)

    def test_generate_secret_pairs(self):
        secret, hashlock = generate_secret()
        self.assertEqual(len(secret), 32)
        self.assertEqual(sha256(secret), hashlock)

    def test_secret_collision_impossible(self):
        """Two generated secrets must differ, and so must their hashlocks."""
        seen = set()
        for _ in range(100):
            secret, hashlock = generate_secret()
            self.assertNotIn(hashlock, seen)
            seen.add(hashlock)


class TestVerify(unittest.TestCase):

    def test_verify_own_secret(self):
        for _ in range(20):
            secret = os.urandom(32)
            self.assertTrue(verify(commit(secret), secret))

    def test_verify_other_secret_fails(self):
        s1, s2 = os.urandom(32), os.urandom(32)
        self.assertFalse(verify(commit(s1), s2))

    def test_verify_accepts_raw_hashlock(self):
        secret, hashlock = generate_secret()
        self.assertTrue(verify(hashlock, secret))

    def test_verify_malformed_candidate(self):
        secret, hashlock = generate_secret()
        self.assertFalse(verify(hashlock, secret[:31]))
        self.assertFalse(verify(hashlock, secret.hex()))
        self.assertFalse(verify(Commitment(hashlock=b"\x00" * 5), secret))

    def test_verify_revealed_commitment(self):
        secret, hashlock = generate_secret()
        self.assertTrue(verify(Commitment(hashlock=hashlock, secret=secret), secret))


class TestHexHelpers(unittest.TestCase):

    def test_to_bytes32_forms(self):
        raw = os.urandom(32)
        self.assertEqual(to_bytes32(raw), raw)
        self.assertEqual(to_bytes32(raw.hex()), raw)
        self.assertEqual(to_bytes32("0x" + raw.hex()), raw)
        self.assertEqual(to_bytes32(to_hex(raw)), raw)

    def test_to_bytes32_rejects_bad_length(self):
        with self.assertRaises(ValueError):
            to_bytes32("0x1234")
        with self.assertRaises(ValueError):
            to_bytes32(b"\x01" * 20)
        with self.assertRaises(ValueError):
            to_bytes32("zz" * 32)


if __name__ == "__main__":
    unittest.main(verbosity=2)
