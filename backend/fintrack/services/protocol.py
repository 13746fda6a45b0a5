"""Collaborator protocols the services depend on.

This module provides:
- LedgerStore: source of a user's movements and budgets
- MarketDataSource: source of a symbol's daily price history

Both live outside this repository (hosted database, market data API);
the services only rely on these async signatures.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from fincore.models.ledger import CategoryBudget, Movement
from fincore.models.market import PricePoint

RawRecord = Mapping[str, Any]


@runtime_checkable
class LedgerStore(Protocol):
    """Protocol for the ledger backend."""

    async def fetch_movements(self, user_id: str) -> Sequence[Movement | RawRecord]:
        """Return every movement recorded for the user, in any order."""
        ...

    async def fetch_budgets(
        self, user_id: str
    ) -> tuple[Sequence[CategoryBudget | RawRecord], Sequence[CategoryBudget | RawRecord]]:
        """Return ``(user_budgets, global_budgets)``."""
        ...


@runtime_checkable
class MarketDataSource(Protocol):
    """Protocol for the market data backend."""

    async def fetch_history(self, symbol: str) -> Sequence[PricePoint | RawRecord]:
        """Return the daily price history for a symbol, in any order."""
        ...
