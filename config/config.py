"""
Configuration classes for the dynamic pricing engine.
Defines factor weights, search parameters and orchestration policy in a
type-safe, extensible way.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta

from utils.env import load_project_dotenv


@dataclass
class FactorModelConfig:
    # Inventory: share of total stock remaining
    critical_stock_ratio: float = 0.1
    low_stock_ratio: float = 0.3
    surplus_stock_ratio: float = 0.8
    critical_stock_multiplier: float = 1.2
    low_stock_multiplier: float = 1.1
    surplus_stock_multiplier: float = 0.9
    # Demand: 0.5 is baseline
    demand_sensitivity: float = 0.4
    demand_factor_bounds: tuple[float, float] = (0.5, 2.0)
    # Competitor: fraction of the gap to the target price closed by the factor
    competitor_pull: float = 0.3
    competitor_factor_bounds: tuple[float, float] = (0.9, 1.1)
    competitor_price_offset: float = 0.0
    # Temporal effects
    peak_hours: tuple[int, int] = (10, 22)  # inclusive
    peak_multiplier: float = 1.05
    weekend_days: tuple[int, ...] = (0, 6)
    weekend_multiplier: float = 1.08
    holiday_multiplier: float = 1.15
    season_sensitivity: float = 0.2
    # User tier discounts, highest threshold first
    tier_discounts: list[tuple[int, float]] = field(
        default_factory=lambda: [(8, 0.9), (5, 0.95)]
    )


@dataclass
class PricingEngineConfig:
    grid_points: int = 201
    refine_tolerance: float = 1e-5  # absolute price tolerance of the bounded refinement
    baseline_demand: float = 1.0
    lowest_undercut: float = 0.95
    premium_markup: float = 1.1
    # Documented fallback bounds when a caller cannot supply them
    default_min_ratio: float = 0.5
    default_max_ratio: float = 2.0


@dataclass
class OrchestratorConfig:
    # Assumed unit cost as a share of base price (30% margin policy)
    cost_ratio: float = 0.7
    validity: timedelta = timedelta(hours=24)
    history_limit: int = 30
    default_page_size: int = 20
    neutral_season_factor: float = 0.5
    engine: PricingEngineConfig = field(default_factory=PricingEngineConfig)
    factors: FactorModelConfig = field(default_factory=FactorModelConfig)

    def __post_init__(self):
        if self.validity <= timedelta(0):
            raise ValueError(f"Price validity window must be positive, got {self.validity}")

    @classmethod
    def from_env(cls) -> "OrchestratorConfig":
        """Build a config from PRICING_* environment variables (and a project .env)."""
        load_project_dotenv()
        overrides = {}
        if os.getenv("PRICING_COST_RATIO"):
            overrides["cost_ratio"] = float(os.environ["PRICING_COST_RATIO"])
        if os.getenv("PRICING_VALIDITY_HOURS"):
            overrides["validity"] = timedelta(hours=float(os.environ["PRICING_VALIDITY_HOURS"]))
        if os.getenv("PRICING_HISTORY_LIMIT"):
            overrides["history_limit"] = int(os.environ["PRICING_HISTORY_LIMIT"])
        if os.getenv("PRICING_DEFAULT_PAGE_SIZE"):
            overrides["default_page_size"] = int(os.environ["PRICING_DEFAULT_PAGE_SIZE"])
        return cls(**overrides)


# Example usage:
# config = OrchestratorConfig.from_env()
# orchestrator = PricingOrchestrator(repository, config=config)
