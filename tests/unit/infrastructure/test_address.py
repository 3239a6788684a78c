"""Unit tests for ledger address derivation."""

import base58
import pytest

from tests.helpers import address
from vote_aggregator.config.infrastructure_config import DEFAULT_PROGRAM_ID
from vote_aggregator.domain.errors import InvalidSubjectIdError
from vote_aggregator.domain.models.vote import is_ledger_address
from vote_aggregator.infrastructure.adapters.ledger.address import (
    derive_market_address,
    generate_signature,
)


class TestDeriveMarketAddress:
    def test_is_deterministic_base58(self) -> None:
        first = derive_market_address(address(1), DEFAULT_PROGRAM_ID)
        second = derive_market_address(address(1), DEFAULT_PROGRAM_ID)

        assert first == second
        assert is_ledger_address(first)
        assert len(base58.b58decode(first)) == 32

    def test_depends_on_market_and_program(self) -> None:
        base = derive_market_address(address(1), DEFAULT_PROGRAM_ID)
        assert base != derive_market_address(address(2), DEFAULT_PROGRAM_ID)
        assert base != derive_market_address(address(1), address(3))

    def test_rejects_malformed_key(self) -> None:
        with pytest.raises(InvalidSubjectIdError):
            derive_market_address("market-1", DEFAULT_PROGRAM_ID)


def test_signature_is_base58() -> None:
    signature = generate_signature("a", "b")
    assert len(base58.b58decode(signature)) == 64
