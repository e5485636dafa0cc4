"""
Module: connectors.pricing_repository

Storage contract for the pricing orchestrator, plus an in-memory
implementation used by tests and demos.
"""

import asyncio
import itertools
from abc import ABC, abstractmethod
from dataclasses import replace

from models.errors import StrategyNotFoundError
from models.pricing import (
    CompetitorPriceInfo,
    DynamicPrice,
    PriceElasticity,
    PriceHistoryData,
    PricingStrategy,
)


class PricingRepository(ABC):
    """
    Abstract store for strategies, history, competitor snapshots, elasticity
    estimates and computed prices. Lookups return None when nothing is
    stored; write failures raise (typically PersistenceError).
    """

    @abstractmethod
    async def get_pricing_strategy(self, sku_id: str) -> PricingStrategy | None:
        """Strategy configured for a SKU."""

    @abstractmethod
    async def save_pricing_strategy(self, strategy: PricingStrategy) -> PricingStrategy:
        """Create (id is None) or update (id set) a strategy; returns the stored row."""

    @abstractmethod
    async def list_pricing_strategies(
        self, offset: int, limit: int
    ) -> tuple[list[PricingStrategy], int]:
        """A slice of strategies ordered by id, and the total count."""

    @abstractmethod
    async def get_price_elasticity(self, sku_id: str) -> PriceElasticity | None:
        """Latest elasticity estimate for a SKU."""

    @abstractmethod
    async def get_competitor_price_info(self, sku_id: str) -> CompetitorPriceInfo | None:
        """Latest competitor snapshot for a SKU."""

    @abstractmethod
    async def get_price_history(self, sku_id: str, limit: int) -> list[PriceHistoryData]:
        """Up to ``limit`` history rows, most recent first."""

    @abstractmethod
    async def save_dynamic_price(self, price: DynamicPrice) -> DynamicPrice:
        """Append a computed price; returns the stored row."""

    @abstractmethod
    async def get_latest_dynamic_price(self, sku_id: str) -> DynamicPrice | None:
        """Most recent computed price for a SKU by effective time, expired or not."""


class InMemoryPricingRepository(PricingRepository):
    """
    Dict-backed repository. Dynamic prices are append-only; strategies are
    keyed by id with one active strategy per SKU.
    """

    def __init__(self):
        self._strategies: dict[int, PricingStrategy] = {}
        self._elasticities: dict[str, PriceElasticity] = {}
        self._competitors: dict[str, CompetitorPriceInfo] = {}
        self._history: dict[str, list[PriceHistoryData]] = {}
        self._prices: dict[str, list[DynamicPrice]] = {}
        self._strategy_ids = itertools.count(1)
        self._price_ids = itertools.count(1)
        self._lock = asyncio.Lock()

    # --- Strategies --- #

    async def get_pricing_strategy(self, sku_id: str) -> PricingStrategy | None:
        matches = [s for s in self._strategies.values() if s.sku_id == sku_id]
        return max(matches, key=lambda s: s.id) if matches else None

    async def save_pricing_strategy(self, strategy: PricingStrategy) -> PricingStrategy:
        async with self._lock:
            if strategy.id is None:
                stored = replace(strategy, id=next(self._strategy_ids))
            elif strategy.id in self._strategies:
                stored = replace(strategy)
            else:
                raise StrategyNotFoundError(strategy.id)
            self._strategies[stored.id] = stored
            return replace(stored)

    async def list_pricing_strategies(
        self, offset: int, limit: int
    ) -> tuple[list[PricingStrategy], int]:
        ordered = [self._strategies[k] for k in sorted(self._strategies)]
        return ordered[offset : offset + limit], len(ordered)

    # --- Reference data --- #

    async def get_price_elasticity(self, sku_id: str) -> PriceElasticity | None:
        return self._elasticities.get(sku_id)

    async def get_competitor_price_info(self, sku_id: str) -> CompetitorPriceInfo | None:
        return self._competitors.get(sku_id)

    async def get_price_history(self, sku_id: str, limit: int) -> list[PriceHistoryData]:
        rows = sorted(self._history.get(sku_id, []), key=lambda h: h.date, reverse=True)
        return rows[:limit]

    def add_price_elasticity(self, elasticity: PriceElasticity):
        self._elasticities[elasticity.sku_id] = elasticity

    def add_competitor_price_info(self, info: CompetitorPriceInfo):
        self._competitors[info.sku_id] = info

    def add_price_history(self, *rows: PriceHistoryData):
        for row in rows:
            self._history.setdefault(row.sku_id, []).append(row)

    # --- Computed prices --- #

    async def save_dynamic_price(self, price: DynamicPrice) -> DynamicPrice:
        async with self._lock:
            stored = replace(price, id=next(self._price_ids))
            self._prices.setdefault(price.sku_id, []).append(stored)
            return stored

    async def get_latest_dynamic_price(self, sku_id: str) -> DynamicPrice | None:
        rows = self._prices.get(sku_id)
        if not rows:
            return None
        # Later inserts win ties on effective time
        return max(reversed(rows), key=lambda p: p.effective_time)

    def dynamic_prices_for(self, sku_id: str) -> list[DynamicPrice]:
        """Every computed price for a SKU in insertion order."""
        return list(self._prices.get(sku_id, []))
