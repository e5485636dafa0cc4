"""
Data models for calls from other services into the pricing orchestrator.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from models.pricing import PricingStrategy


class PricingRequest(BaseModel):
    """Inputs for a single SKU price computation."""

    sku_id: str
    base_price: float = Field(ge=0)
    current_stock: int = 0
    total_stock: int = 0
    daily_demand: float = 0.0
    average_daily_demand: float = 0.0
    competitor_price: float = Field(default=0.0, ge=0)  # 0 = use stored snapshot
    user_level: str = ""


@dataclass
class StrategyPage:
    """One page of stored strategies plus the total row count."""

    strategies: list[PricingStrategy] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
