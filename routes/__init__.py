"""HTTP routes mounted by server.py."""
