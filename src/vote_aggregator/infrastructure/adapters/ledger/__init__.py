"""Ledger adapters."""

from vote_aggregator.infrastructure.adapters.ledger.address import (
    derive_market_address,
    generate_signature,
)
from vote_aggregator.infrastructure.adapters.ledger.gateway_client import (
    LedgerGatewayClient,
)

__all__ = ["LedgerGatewayClient", "derive_market_address", "generate_signature"]
