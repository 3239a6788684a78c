"""Deterministic base58 ledger addresses for tests."""

import base58


def address(seed: int) -> str:
    """A valid 32-byte base58 address derived from a small integer seed."""
    raw = seed.to_bytes(4, "big") * 8
    return base58.b58encode(raw).decode("ascii")


def voters(count: int, offset: int = 1000) -> list[str]:
    """`count` distinct voter addresses."""
    return [address(offset + i) for i in range(count)]
