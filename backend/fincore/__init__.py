"""Core analytics logic for the personal finance tracker.

This package contains pure business logic with no I/O dependencies
(no database, cache, or network access). It turns snapshots of ledger
movements and price observations into the aggregates and signals the
presentation layer renders. The fintrack package is the only caller
that touches the outside world.
"""

from fincore.ledger import aggregate_ledger
from fincore.market import analyze_market

__all__ = ["aggregate_ledger", "analyze_market"]
