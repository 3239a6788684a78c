"""Ledger address derivation.

A market account's address is derived from the seed "market", the
market's key and the program id. Addresses are base58 strings.
"""

from __future__ import annotations

import hashlib

import base58

from vote_aggregator.domain.models.vote import validate_ledger_address

MARKET_SEED = b"market"


def derive_market_address(market_key: str, program_id: str) -> str:
    """Derive the address of a market account.

    Args:
        market_key: Base58 key of the market.
        program_id: Base58 id of the markets program.

    Returns:
        Base58-encoded sha256(seed || market key || program id).

    Raises:
        InvalidSubjectIdError: If either input is not a base58 address.
    """
    validate_ledger_address("market_key", market_key)
    validate_ledger_address("program_id", program_id)

    digest = hashlib.sha256(
        MARKET_SEED + base58.b58decode(market_key) + base58.b58decode(program_id)
    ).digest()
    return base58.b58encode(digest).decode("ascii")


def generate_signature(*parts: str) -> str:
    """Deterministic base58 transaction signature for in-memory ledgers."""
    digest = hashlib.sha512("|".join(parts).encode("utf-8")).digest()
    return base58.b58encode(digest).decode("ascii")
