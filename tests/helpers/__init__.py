"""Shared test helpers."""

from tests.helpers.addresses import address, voters

__all__ = ["address", "voters"]
