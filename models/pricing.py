"""
Pricing-related data models for the dynamic pricing engine.
Includes engine inputs/outputs, persisted strategy and price rows, and the
competitor and history snapshots the orchestrator reads before pricing.
"""

from dataclasses import dataclass, field
from datetime import datetime

from models.enums import ElasticityType, StrategyType


@dataclass
class PricingFactors:
    """
    Raw signals consumed by the composite factor model.
    """

    stock: int
    total_stock: int
    demand_level: float = 0.5  # 0.5 is baseline demand
    competitor_price: float = 0.0  # 0 means unknown
    time_of_day: int = 0  # 0-23
    day_of_week: int = 1  # 0-6, 0 is Sunday
    is_holiday: bool = False
    user_level: int = 1  # 1-10
    season_factor: float = 0.5  # 0-1, 0.5 is neutral


@dataclass(frozen=True)
class PricingResult:
    """
    Output of the composite model: final price plus each factor for auditing.
    """

    final_price: float
    inventory_factor: float = 1.0
    demand_factor: float = 1.0
    competitor_factor: float = 1.0
    time_factor: float = 1.0
    user_factor: float = 1.0


@dataclass(frozen=True)
class DemandData:
    """A historical (price, demand) observation."""

    price: float
    demand: float


@dataclass
class PricingStrategy:
    """
    Operator-managed pricing configuration for a SKU.
    A strategy without an id has not been stored yet.
    """

    sku_id: str
    strategy_type: StrategyType = StrategyType.DYNAMIC
    min_price: float = 0.0
    max_price: float = 0.0
    inventory_threshold: int = 0  # percent of total stock, 0 = engine default
    demand_threshold: int = 0
    competitor_price_offset: float = 0.0
    enabled: bool = True
    id: int | None = None

    def __post_init__(self):
        self.strategy_type = StrategyType(self.strategy_type)


@dataclass(frozen=True)
class DynamicPrice:
    """
    A computed price with an explicit validity window. Rows are append-only.
    """

    sku_id: str
    base_price: float
    final_price: float
    price_adjustment: float
    effective_time: datetime
    expiry_time: datetime
    inventory_factor: float = 1.0
    demand_factor: float = 1.0
    competitor_factor: float = 1.0
    time_factor: float = 1.0
    user_factor: float = 1.0
    strategy_type: StrategyType = StrategyType.DYNAMIC
    id: int | None = None


def is_valid(price: DynamicPrice, now: datetime) -> bool:
    """True while ``now`` falls in the price's [effective, expiry) window."""
    return price.effective_time <= now < price.expiry_time


@dataclass
class PriceElasticity:
    """
    Per-SKU demand sensitivity estimate.
    """

    sku_id: str
    elasticity: float = 1.0
    data_points: int = 0
    analyzed_at: datetime | None = None

    @property
    def elasticity_type(self) -> ElasticityType:
        magnitude = abs(self.elasticity)
        if magnitude > 1.0:
            return ElasticityType.ELASTIC
        if magnitude < 1.0:
            return ElasticityType.INELASTIC
        return ElasticityType.UNIT


@dataclass
class CompetitorPrice:
    """A single competitor's listed price for a SKU."""

    competitor_name: str
    price: float
    url: str = ""
    last_updated: datetime | None = None


@dataclass
class CompetitorPriceInfo:
    """
    Snapshot of competitor prices for a SKU, with derived aggregates.
    Non-positive prices are treated as missing listings.
    """

    sku_id: str
    competitors: list[CompetitorPrice] = field(default_factory=list)
    last_updated: datetime | None = None

    @property
    def prices(self) -> list[float]:
        return [c.price for c in self.competitors if c.price > 0]

    @property
    def lowest_price(self) -> float:
        prices = self.prices
        return min(prices) if prices else 0.0

    @property
    def highest_price(self) -> float:
        prices = self.prices
        return max(prices) if prices else 0.0

    @property
    def average_price(self) -> float:
        prices = self.prices
        return sum(prices) / len(prices) if prices else 0.0


@dataclass(frozen=True)
class PriceHistoryData:
    """Daily sales observation for a SKU at a given price."""

    sku_id: str
    date: datetime
    price: float
    quantity: int

    def to_demand_data(self) -> DemandData:
        return DemandData(price=self.price, demand=float(self.quantity))
