"""
Demand estimation from recent (price, demand) observations.

Demand is modelled as linear in the relative price change around the
historical average:

    demand(p) = d_ref * (1 - |elasticity| * (p - p_ref) / p_ref)

where p_ref and d_ref are the mean observed price and demand. Everything
here is a pure function of its arguments; the profit search calls
``predict_demand`` many times per request.
"""

import math
from collections.abc import Callable, Sequence

import numpy as np

from models.pricing import DemandData

MAX_HISTORY_POINTS = 30


def predict_demand(
    price: float,
    history: Sequence[DemandData],
    elasticity: float = 1.0,
    baseline_demand: float = 1.0,
    max_points: int = MAX_HISTORY_POINTS,
) -> float:
    """
    Predict demand at ``price``.

    Args:
        price: Candidate price.
        history: Observations, most recent first. Only the first
            ``max_points`` are used.
        elasticity: Demand sensitivity to relative price changes. The sign is
            ignored; demand always falls as price rises.
        baseline_demand: Flat demand returned when there is no history.

    Returns:
        Non-negative predicted demand.
    """
    points = list(history[:max_points])
    if not points:
        return float(baseline_demand)

    prices = np.array([p.price for p in points], dtype=float)
    demands = np.array([p.demand for p in points], dtype=float)
    ref_price = float(np.mean(prices))
    ref_demand = float(np.mean(demands))

    if not math.isfinite(ref_demand):
        return float(baseline_demand)
    if ref_price <= 0 or not math.isfinite(ref_price):
        return max(ref_demand, 0.0)

    predicted = ref_demand * (1.0 - abs(elasticity) * (price - ref_price) / ref_price)
    if not math.isfinite(predicted):
        return 0.0
    return max(predicted, 0.0)


def demand_function(
    history: Sequence[DemandData],
    elasticity: float = 1.0,
    baseline_demand: float = 1.0,
    max_points: int = MAX_HISTORY_POINTS,
) -> Callable[[float], float]:
    """Bind history and elasticity into a single-argument demand curve."""
    points = tuple(history[:max_points])

    def demand_at(price: float) -> float:
        return predict_demand(price, points, elasticity, baseline_demand, max_points)

    return demand_at


def point_elasticity(
    previous_price: float,
    previous_demand: float,
    current_price: float,
    current_demand: float,
) -> float:
    """
    Observed elasticity between two (price, demand) points: percent change in
    demand per percent change in price. Returns 0.0 when it is undefined.
    """
    if previous_price == 0 or previous_demand == 0:
        return 0.0
    price_change = (current_price - previous_price) / previous_price
    if price_change == 0:
        return 0.0
    demand_change = (current_demand - previous_demand) / previous_demand
    return demand_change / price_change
