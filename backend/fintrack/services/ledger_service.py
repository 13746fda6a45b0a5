"""Ledger dashboard service.

Fetches a user's movements and budgets from the ledger store, resolves
budgets (user first, then store-wide defaults, then the YAML defaults)
and runs the aggregation on the snapshot.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from fincore.ledger import aggregate_ledger, available_categories, available_years, parse_movements
from fincore.ledger.budgets import resolve_budgets
from fincore.models.config import EngineConfig
from fincore.models.ledger import AggregationResult, LedgerFilter
from fintrack.category_config import CategoryConfig
from fintrack.services.protocol import LedgerStore

logger = logging.getLogger(__name__)


class LedgerService:
    """Aggregate a user's ledger for the dashboard."""

    def __init__(
        self,
        store: LedgerStore,
        config: EngineConfig | None = None,
        categories: CategoryConfig | None = None,
    ):
        self.store = store
        self.config = config
        self.categories = categories or CategoryConfig()

    async def _fetch_movements(self, user_id: str):
        try:
            return await self.store.fetch_movements(user_id)
        except Exception as e:
            logger.error(f"Failed to fetch movements for user {user_id}: {e}")
            raise

    async def summarize(
        self,
        user_id: str,
        ledger_filter: LedgerFilter,
        now: date | datetime | None = None,
    ) -> AggregationResult:
        """
        Aggregate the user's current ledger snapshot.

        Args:
            user_id: Ledger owner
            ledger_filter: Year / month / category selection
            now: Anchor for month-over-month and trend (defaults to now)

        Returns:
            AggregationResult for the selection
        """
        movements = await self._fetch_movements(user_id)
        try:
            user_budgets, global_budgets = await self.store.fetch_budgets(user_id)
        except Exception as e:
            logger.error(f"Failed to fetch budgets for user {user_id}: {e}")
            raise

        budgets = resolve_budgets(
            user_budgets, global_budgets, self.categories.global_budgets()
        )
        result = aggregate_ledger(
            movements,
            budgets,
            ledger_filter,
            now=now,
            registry=self.categories.registry(),
            config=self.config,
        )

        if result.rejected:
            logger.warning(
                f"User {user_id}: {len(result.rejected)} ledger records rejected "
                f"(first: {result.rejected[0].reason})"
            )
        over = result.categories_over_budget
        if over:
            names = ", ".join(c.category for c in over)
            logger.info(f"User {user_id}: {len(over)} categories over budget: {names}")
        return result

    async def filter_options(self, user_id: str) -> tuple[list[int], list[str]]:
        """Years and categories present in the user's ledger."""
        movements, _ = parse_movements(
            await self._fetch_movements(user_id),
            registry=self.categories.registry(),
        )
        return available_years(movements), available_categories(movements)
