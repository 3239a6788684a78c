"""Domain layer: vote models, ledger subject state and decision policy."""
