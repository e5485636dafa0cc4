"""
Read-mostly cache of pricing strategies keyed by SKU.

The table is never mutated in place: every refresh builds a new mapping and
publishes it with a single attribute assignment, so a reader always sees
either the old table or the new one in full.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from models.pricing import PricingStrategy

logger = logging.getLogger(__name__)


class StrategyCache:
    """Snapshot of stored strategies, replaced wholesale on reload."""

    def __init__(self):
        self._table: Mapping[str, PricingStrategy] = MappingProxyType({})
        self.loaded_at: datetime | None = None

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, sku_id: str) -> bool:
        return sku_id in self._table

    @property
    def loaded(self) -> bool:
        return self.loaded_at is not None

    def get(self, sku_id: str) -> PricingStrategy | None:
        return self._table.get(sku_id)

    def snapshot(self) -> Mapping[str, PricingStrategy]:
        """The current table; later reloads do not affect the returned mapping."""
        return self._table

    def replace(self, strategies: Iterable[PricingStrategy], loaded_at: datetime | None = None):
        """Publish a new table built from ``strategies`` (last one per SKU wins)."""
        table = {s.sku_id: s for s in strategies}
        self._table = MappingProxyType(table)
        self.loaded_at = loaded_at or datetime.now()
        logger.info(f"Strategy cache reloaded with {len(table)} strategies.")

    def with_strategy(self, strategy: PricingStrategy, loaded_at: datetime | None = None):
        """
        Publish a copy of the current table with one strategy added or replaced.
        An entry stored under another SKU with the same id is dropped.
        """
        table = {
            sku: s
            for sku, s in self._table.items()
            if strategy.id is None or s.id != strategy.id
        }
        table[strategy.sku_id] = strategy
        self._table = MappingProxyType(table)
        self.loaded_at = loaded_at or datetime.now()
