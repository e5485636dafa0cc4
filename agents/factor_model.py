"""
Factor model for composite dynamic pricing.

Each function turns one raw signal into a dimensionless price multiplier.
A multiplier of 1.0 means "no adjustment"; every function returns exactly
1.0 for neutral or degenerate input instead of raising.
"""

import math

from config.config import FactorModelConfig

DEFAULT_FACTOR_CONFIG = FactorModelConfig()


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Force ``value`` into [min_value, max_value]."""
    return max(min_value, min(max_value, value))


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def inventory_factor(
    stock: int,
    total_stock: int,
    config: FactorModelConfig = DEFAULT_FACTOR_CONFIG,
) -> float:
    """
    Scarcity premium: the less stock remains, the higher the multiplier.
    An empty or negative catalog figure yields exactly 1.0.
    """
    if total_stock <= 0 or stock < 0:
        return 1.0
    ratio = stock / total_stock
    if ratio < config.critical_stock_ratio:
        return config.critical_stock_multiplier
    if ratio < config.low_stock_ratio:
        return config.low_stock_multiplier
    if ratio > config.surplus_stock_ratio:
        return config.surplus_stock_multiplier
    return 1.0


def demand_factor(
    demand_level: float,
    elasticity: float = 1.0,
    config: FactorModelConfig = DEFAULT_FACTOR_CONFIG,
) -> float:
    """
    Raise price above baseline demand (0.5) and lower it below.
    Only the magnitude of ``elasticity`` is used, so signed estimates such as
    those from ``point_elasticity`` keep the same direction.
    """
    if not _finite(demand_level, elasticity):
        return 1.0
    factor = 1.0 + (demand_level - 0.5) * config.demand_sensitivity * abs(elasticity)
    low, high = config.demand_factor_bounds
    return clamp(factor, low, high)


def competitor_factor(
    base_price: float,
    competitor_price: float,
    offset: float | None = None,
    config: FactorModelConfig = DEFAULT_FACTOR_CONFIG,
) -> float:
    """
    Pull the base price part of the way toward ``competitor_price + offset``.
    Unknown competitor prices (<= 0) are neutral.
    """
    if offset is None:
        offset = config.competitor_price_offset
    if not _finite(base_price, competitor_price, offset):
        return 1.0
    if competitor_price <= 0 or base_price <= 0:
        return 1.0
    target = competitor_price + offset
    if target <= 0:
        return 1.0
    factor = 1.0 + config.competitor_pull * (target / base_price - 1.0)
    low, high = config.competitor_factor_bounds
    return clamp(factor, low, high)


def time_factor(
    time_of_day: int,
    day_of_week: int,
    is_holiday: bool = False,
    season_factor: float = 0.5,
    config: FactorModelConfig = DEFAULT_FACTOR_CONFIG,
) -> float:
    """Combined peak-hour, weekend, holiday and seasonal multiplier."""
    factor = 1.0
    peak_start, peak_end = config.peak_hours
    if peak_start <= time_of_day <= peak_end:
        factor *= config.peak_multiplier
    if day_of_week in config.weekend_days:
        factor *= config.weekend_multiplier
    if is_holiday:
        factor *= config.holiday_multiplier
    if _finite(season_factor):
        factor *= 1.0 + (season_factor - 0.5) * config.season_sensitivity
    return factor


def user_factor(user_level: int, config: FactorModelConfig = DEFAULT_FACTOR_CONFIG) -> float:
    """Loyalty discount; higher tiers get a larger discount."""
    for threshold, multiplier in config.tier_discounts:
        if user_level >= threshold:
            return multiplier
    return 1.0
