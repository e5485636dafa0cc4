import itertools
import logging
import math
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from scipy.optimize import minimize_scalar

from agents.demand_estimator import demand_function
from agents.pricing_engine import PricingEngine
from models.errors import InvalidBoundsError
from models.pricing import DemandData, PricingFactors, PricingResult

# --- Fixtures --- #

@pytest.fixture
def engine() -> PricingEngine:
    """Base 100 bounded to [50, 200], unit elasticity."""
    return PricingEngine(base_price=100.0, min_price=50.0, max_price=200.0, elasticity=1.0)


@pytest.fixture
def neutral_factors() -> PricingFactors:
    return PricingFactors(
        stock=50,
        total_stock=100,
        demand_level=0.5,
        competitor_price=0.0,
        time_of_day=3,
        day_of_week=3,
        is_holiday=False,
        user_level=1,
        season_factor=0.5,
    )

# --- Construction --- #

def test_min_above_max_is_rejected():
    with pytest.raises(InvalidBoundsError) as exc_info:
        PricingEngine(base_price=100.0, min_price=200.0, max_price=50.0)
    assert isinstance(exc_info.value, ValueError)
    assert exc_info.value.min_price == 200.0


def test_with_default_bounds():
    engine = PricingEngine.with_default_bounds(100.0, elasticity=1.5)
    assert engine.min_price == 50.0
    assert engine.max_price == 200.0
    assert engine.elasticity == 1.5

# --- calculate_price --- #

def test_neutral_factors_return_base_price(engine, neutral_factors):
    result = engine.calculate_price(neutral_factors)
    assert result == PricingResult(final_price=100.0)


def test_zero_total_stock_inventory_factor_is_exactly_one(engine, neutral_factors):
    neutral_factors.total_stock = 0
    neutral_factors.stock = 0
    result = engine.calculate_price(neutral_factors)
    assert result.inventory_factor == 1.0
    assert result.final_price == 100.0


def test_calculate_price_clamps_to_max(engine):
    factors = PricingFactors(
        stock=0,
        total_stock=100,
        demand_level=10.0,
        competitor_price=1000.0,
        time_of_day=12,
        day_of_week=6,
        is_holiday=True,
        user_level=1,
        season_factor=1.0,
    )
    assert engine.calculate_price(factors).final_price == 200.0


def test_calculate_price_clamps_to_min():
    engine = PricingEngine(base_price=100.0, min_price=95.0, max_price=200.0)
    factors = PricingFactors(stock=90, total_stock=100, demand_level=0.0, user_level=9, time_of_day=3, day_of_week=3)
    result = engine.calculate_price(factors)
    assert result.inventory_factor == 0.9
    assert result.demand_factor == pytest.approx(0.8)
    assert result.user_factor == 0.9
    assert result.final_price == 95.0


def test_calculate_price_is_deterministic(engine):
    factors = PricingFactors(
        stock=12, total_stock=100, demand_level=0.8, competitor_price=120.0,
        time_of_day=14, day_of_week=5, user_level=7, season_factor=0.6,
    )
    first = engine.calculate_price(factors)
    second = PricingEngine(100.0, 50.0, 200.0, 1.0).calculate_price(factors)
    assert first == second


@pytest.mark.parametrize(
    "stock, demand_level, competitor_price, hour, day, holiday, user_level",
    list(
        itertools.product(
            [0, 20, 95],
            [0.0, 0.5, 3.0],
            [0.0, 40.0, 400.0],
            [3, 12],
            [2, 6],
            [False, True],
            [1, 10],
        )
    ),
)
def test_final_price_always_within_bounds(
    engine, stock, demand_level, competitor_price, hour, day, holiday, user_level
):
    factors = PricingFactors(
        stock=stock,
        total_stock=100,
        demand_level=demand_level,
        competitor_price=competitor_price,
        time_of_day=hour,
        day_of_week=day,
        is_holiday=holiday,
        user_level=user_level,
    )
    result = engine.calculate_price(factors)
    assert engine.min_price <= result.final_price <= engine.max_price


def test_non_finite_result_falls_back_and_warns(neutral_factors, caplog):
    engine = PricingEngine(base_price=math.nan, min_price=50.0, max_price=200.0)
    with caplog.at_level(logging.WARNING):
        result = engine.calculate_price(neutral_factors)
    assert result.final_price == 50.0
    assert not math.isnan(result.final_price)
    assert "non-finite price" in caplog.text

# --- optimal_price_for_profit --- #

def test_constant_demand_returns_max_price(engine):
    assert engine.optimal_price_for_profit(70.0, lambda p: 10.0) == 200.0


def test_zero_demand_keeps_base_price(engine):
    price = engine.optimal_price_for_profit(70.0, lambda p: 0.0)
    assert price == 100.0


def test_linear_demand_finds_interior_optimum(engine):
    # (p - 70) * (300 - p) peaks at p = 185
    price = engine.optimal_price_for_profit(70.0, lambda p: max(0.0, 300.0 - p))
    assert price == pytest.approx(185.0, abs=0.05)


def test_estimated_demand_curve_optimum(engine):
    # Demand 10 * (2 - p / 100) with cost 70 peaks at p = 135
    curve = demand_function([DemandData(price=100.0, demand=10.0)], elasticity=1.0)
    price = engine.optimal_price_for_profit(70.0, curve)
    assert price == pytest.approx(135.0, abs=0.05)


def test_optimal_price_never_below_cost(engine):
    # Demand collapses quickly with price, pulling the optimum toward the floor
    price = engine.optimal_price_for_profit(120.0, lambda p: max(0.0, 1000.0 - 5 * p))
    assert price >= 120.0
    assert engine.min_price <= price <= engine.max_price


def test_cost_above_ceiling_returns_ceiling(engine):
    assert engine.optimal_price_for_profit(250.0, lambda p: 10.0) == 200.0


def test_non_finite_demand_degrades_to_base(engine):
    assert engine.optimal_price_for_profit(70.0, lambda p: math.nan) == 100.0


def test_optimal_price_is_deterministic(engine):
    curve = lambda p: max(0.0, 300.0 - p)  # noqa: E731
    assert engine.optimal_price_for_profit(70.0, curve) == engine.optimal_price_for_profit(70.0, curve)


def test_refinement_is_bounded_to_neighbouring_grid_points(engine):
    curve = lambda p: max(0.0, 300.0 - p)  # noqa: E731
    with patch("agents.pricing_engine.minimize_scalar", wraps=minimize_scalar) as mock_minimize:
        price = engine.optimal_price_for_profit(70.0, curve)

    mock_minimize.assert_called_once()
    left, right = mock_minimize.call_args.kwargs["bounds"]
    assert mock_minimize.call_args.kwargs["method"] == "bounded"
    assert left < 185.0 < right
    assert right - left == pytest.approx(2 * (200.0 - 70.0) / 200)
    assert price == pytest.approx(185.0, abs=0.05)


def test_single_point_interval_skips_refinement():
    engine = PricingEngine(base_price=100.0, min_price=100.0, max_price=100.0)
    with patch("agents.pricing_engine.minimize_scalar") as mock_minimize:
        price = engine.optimal_price_for_profit(70.0, lambda p: 10.0)
    mock_minimize.assert_not_called()
    assert price == 100.0


def test_negative_elasticity_prices_like_its_magnitude(neutral_factors):
    neutral_factors.demand_level = 1.0
    signed = PricingEngine(100.0, 50.0, 200.0, elasticity=-1.5)
    magnitude = PricingEngine(100.0, 50.0, 200.0, elasticity=1.5)
    assert signed.calculate_price(neutral_factors) == magnitude.calculate_price(neutral_factors)
    assert signed.calculate_price(neutral_factors).final_price == 130.0

# --- competitive_pricing --- #

def test_competitive_empty_list_returns_base(engine):
    assert engine.competitive_pricing([], "average") == 100.0


def test_competitive_empty_list_base_outside_bounds():
    engine = PricingEngine(base_price=300.0, min_price=50.0, max_price=200.0)
    assert engine.competitive_pricing([], "average") == 200.0


def test_competitive_average(engine):
    assert engine.competitive_pricing([100, 200, 300], "average") == 200.0


def test_competitive_average_is_clamped():
    engine = PricingEngine(base_price=100.0, min_price=50.0, max_price=150.0)
    assert engine.competitive_pricing([100, 200, 300], "average") == 150.0


@pytest.mark.parametrize(
    "strategy, expected",
    [("lowest", 95.0), ("premium", 220.0), ("average", 200.0), ("unheard_of", 100.0)],
)
def test_competitive_strategies(strategy, expected):
    engine = PricingEngine(base_price=100.0, min_price=50.0, max_price=300.0)
    assert engine.competitive_pricing([100, 200, 300], strategy) == pytest.approx(expected)


def test_competitive_ignores_missing_listings(engine):
    assert engine.competitive_pricing([0, -5, math.nan, 120], "average") == 120.0

# --- Other adjustments --- #

@pytest.mark.parametrize(
    "ratio, expected",
    [(0.3, 80.0), (0.8, 100.0), (1.5, 125.0), (3.0, 180.0), (10.0, 240.0)],
)
def test_surge_price(ratio, expected):
    engine = PricingEngine(base_price=100.0, min_price=50.0, max_price=300.0)
    assert engine.surge_price(ratio) == pytest.approx(expected)


@pytest.mark.parametrize(
    "offset_days, expected",
    [(-1, 80.0), (1, 80.0), (3, 100.0), (6, 110.0), (9, 70.0), (15, 70.0)],
)
def test_time_based_price(engine, offset_days, expected):
    start = datetime(2026, 11, 1)
    end = start + timedelta(days=10)
    now = start + timedelta(days=offset_days)
    assert engine.time_based_price(start, end, now) == pytest.approx(expected)


def test_time_based_price_empty_window(engine):
    start = datetime(2026, 11, 1)
    assert engine.time_based_price(start, start, start) == 100.0


def test_revenue_and_profit():
    assert PricingEngine.calculate_revenue(10.0, 5.0) == 50.0
    assert PricingEngine.calculate_profit(10.0, 4.0, 5.0) == 30.0
