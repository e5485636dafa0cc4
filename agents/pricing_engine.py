"""
Pricing engine for a single SKU.

The engine owns (base_price, min_price, max_price, elasticity) and exposes
three algorithms that all return prices inside [min_price, max_price]:

- composite factor pricing (``calculate_price``),
- profit maximization over a demand curve (``optimal_price_for_profit``),
- competitor matching (``competitive_pricing``).

It is stateless after construction and performs no I/O, so a single
instance can be shared freely between concurrent callers.
"""

import math
from collections.abc import Callable, Sequence
from datetime import datetime

import numpy as np
from scipy.optimize import minimize_scalar

from agents import factor_model
from agents.factor_model import clamp
from config.config import FactorModelConfig, PricingEngineConfig
from models.enums import CompetitiveStrategy
from models.errors import InvalidBoundsError
from models.pricing import PricingFactors, PricingResult
from utils.logger import get_logger

class PricingEngine:
    """
    Bounded pricing algorithms for one SKU.
    Raises InvalidBoundsError at construction if min_price > max_price.
    """

    def __init__(
        self,
        base_price: float,
        min_price: float,
        max_price: float,
        elasticity: float = 1.0,
        factor_config: FactorModelConfig | None = None,
        config: PricingEngineConfig | None = None,
    ):
        if min_price > max_price:
            raise InvalidBoundsError(min_price, max_price)
        self.base_price = float(base_price)
        self.min_price = float(min_price)
        self.max_price = float(max_price)
        self.elasticity = float(elasticity)
        self.factor_config = factor_config or FactorModelConfig()
        self.config = config or PricingEngineConfig()
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def with_default_bounds(
        cls,
        base_price: float,
        elasticity: float = 1.0,
        factor_config: FactorModelConfig | None = None,
        config: PricingEngineConfig | None = None,
    ) -> "PricingEngine":
        """Engine bounded to [0.5 x base, 2 x base] (ratios from ``config``)."""
        config = config or PricingEngineConfig()
        return cls(
            base_price,
            base_price * config.default_min_ratio,
            base_price * config.default_max_ratio,
            elasticity,
            factor_config=factor_config,
            config=config,
        )

    # --- Bounds --- #

    def clamp(self, price: float) -> float:
        return clamp(price, self.min_price, self.max_price)

    def fallback_price(self) -> float:
        """Base price forced into bounds; used whenever a computation degenerates."""
        if not math.isfinite(self.base_price):
            return self.min_price
        return self.clamp(round(self.base_price, 2))

    def _bounded(self, price: float, source: str) -> float:
        if not math.isfinite(price):
            self.logger.warning(
                f"{source} produced non-finite price {price}; "
                f"falling back to base price {self.base_price:.2f}"
            )
            return self.fallback_price()
        return self.clamp(round(price, 2))

    # --- Composite factor pricing --- #

    def calculate_price(self, factors: PricingFactors) -> PricingResult:
        """Apply all five factors to the base price and clamp the result."""
        cfg = self.factor_config
        inventory = factor_model.inventory_factor(factors.stock, factors.total_stock, cfg)
        demand = factor_model.demand_factor(factors.demand_level, self.elasticity, cfg)
        competitor = factor_model.competitor_factor(
            self.base_price, factors.competitor_price, config=cfg
        )
        temporal = factor_model.time_factor(
            factors.time_of_day,
            factors.day_of_week,
            factors.is_holiday,
            factors.season_factor,
            cfg,
        )
        user = factor_model.user_factor(factors.user_level, cfg)

        raw_price = self.base_price * inventory * demand * competitor * temporal * user
        final_price = self._bounded(raw_price, "Composite pricing")
        self.logger.debug(
            f"Factors Inv={inventory:.3f}, Dem={demand:.3f}, Comp={competitor:.3f}, "
            f"Time={temporal:.3f}, User={user:.3f} -> raw {raw_price:.2f}, final {final_price:.2f}"
        )
        return PricingResult(
            final_price=final_price,
            inventory_factor=inventory,
            demand_factor=demand,
            competitor_factor=competitor,
            time_factor=temporal,
            user_factor=user,
        )

    # --- Profit maximization --- #

    @staticmethod
    def calculate_revenue(price: float, demand: float) -> float:
        return price * demand

    @staticmethod
    def calculate_profit(price: float, cost: float, demand: float) -> float:
        return (price - cost) * demand

    def _profit_at(self, price: float, cost: float, demand_fn: Callable[[float], float]) -> float:
        demand = float(demand_fn(price))
        profit = self.calculate_profit(price, cost, demand)
        return profit if math.isfinite(profit) else -math.inf

    def optimal_price_for_profit(
        self, cost: float, demand_fn: Callable[[float], float]
    ) -> float:
        """
        Find the price in bounds that maximizes (price - cost) * demand_fn(price).

        The search never goes below ``cost`` unless the ceiling itself is
        below cost. A uniform grid locates the best region and a
        bounded scalar minimization refines between the neighbouring grid
        points; ties keep the grid price.
        If no candidate is profitable, the base price (clamped to the search
        interval) is returned.
        """
        if not math.isfinite(cost):
            self.logger.warning(f"Non-finite cost {cost}; using base price.")
            return self.fallback_price()

        low = min(max(self.min_price, cost), self.max_price)
        high = self.max_price
        grid = np.linspace(low, high, max(self.config.grid_points, 2))
        profits = np.array([self._profit_at(float(p), cost, demand_fn) for p in grid])

        best_idx = int(np.argmax(profits))
        best_price = float(grid[best_idx])
        best_profit = float(profits[best_idx])
        if not best_profit > 0:
            self.logger.info(
                f"No profitable price in [{low:.2f}, {high:.2f}] at cost {cost:.2f}; "
                "keeping base price."
            )
            return clamp(round(self.base_price, 2), low, high)

        left = float(grid[max(best_idx - 1, 0)])
        right = float(grid[min(best_idx + 1, len(grid) - 1)])
        if right > left:
            refined = self._refine(left, right, cost, demand_fn)
            if self._profit_at(refined, cost, demand_fn) > best_profit:
                best_price = refined

        return self._bounded(best_price, "Profit search")

    def _refine(
        self,
        left: float,
        right: float,
        cost: float,
        demand_fn: Callable[[float], float],
    ) -> float:
        result = minimize_scalar(
            lambda p: -self._profit_at(p, cost, demand_fn),
            bounds=(left, right),
            method="bounded",
            options={"xatol": self.config.refine_tolerance},
        )
        return float(result.x)

    # --- Competitor matching --- #

    def competitive_pricing(
        self,
        competitor_prices: Sequence[float],
        strategy: CompetitiveStrategy | str = CompetitiveStrategy.AVERAGE,
    ) -> float:
        """
        Position against competitor prices. An empty list, or an unknown
        strategy name, yields the base price clamped to bounds.
        """
        prices = [float(p) for p in competitor_prices if math.isfinite(p) and p > 0]
        if not prices:
            return self.fallback_price()

        try:
            strategy = CompetitiveStrategy(strategy)
        except ValueError:
            self.logger.warning(f"Unknown competitive strategy '{strategy}'; using base price.")
            return self.fallback_price()

        match strategy:
            case CompetitiveStrategy.AVERAGE:
                price = float(np.mean(prices))
            case CompetitiveStrategy.LOWEST:
                price = min(prices) * self.config.lowest_undercut
            case CompetitiveStrategy.PREMIUM:
                price = float(np.mean(prices)) * self.config.premium_markup
        return self._bounded(price, f"Competitive pricing ({strategy.value})")

    # --- Other adjustments --- #

    def surge_price(self, demand_supply_ratio: float) -> float:
        """Scale the base price by how far demand outruns supply."""
        r = demand_supply_ratio
        if not math.isfinite(r):
            return self.fallback_price()
        if r < 0.5:
            multiplier = 0.8
        elif r < 1.0:
            multiplier = 1.0
        elif r < 2.0:
            multiplier = 1.0 + (r - 1.0) * 0.5
        elif r < 5.0:
            multiplier = 1.5 + (r - 2.0) * 0.3
        else:
            multiplier = 2.4
        return self._bounded(self.base_price * multiplier, "Surge pricing")

    def time_based_price(self, start: datetime, end: datetime, now: datetime) -> float:
        """
        Price by progress through a sale window: early-bird discount, then
        list price, a late premium, and clearance in the final 20%.
        """
        total = (end - start).total_seconds()
        if total <= 0:
            return self.fallback_price()
        elapsed = clamp((now - start).total_seconds(), 0.0, total)
        progress = elapsed / total
        if progress < 0.2:
            multiplier = 0.8
        elif progress < 0.5:
            multiplier = 1.0
        elif progress < 0.8:
            multiplier = 1.1
        else:
            multiplier = 0.7
        return self._bounded(self.base_price * multiplier, "Time-based pricing")
