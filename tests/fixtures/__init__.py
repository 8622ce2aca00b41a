"""
Test fixtures for deterministic testing.

This module provides:
- NOW / at(): pinned instants on the reference day
- make_block: create a block through a BlockManager
"""

from .blocks import NOW, OWNER_A, OWNER_B, at, make_block

__all__ = ["NOW", "OWNER_A", "OWNER_B", "at", "make_block"]
