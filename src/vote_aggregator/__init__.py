"""
Vote Aggregator - off-chain vote aggregation and ledger commit service.

Community votes on market proposals and disputes are staged in a key-value
cache, tallied, and committed to the ledger as a single state-transition
transaction once quorum and approval thresholds are decided.

Operating rules:
- A subject is committed at most once; the per-subject lock is the only
  serialization point between concurrent sweeps
- Votes are last-write-wins per voter
- Ledger failures are classified, never swallowed
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
