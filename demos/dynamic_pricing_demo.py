"""
End-to-end walkthrough of the dynamic pricing engine.

Seeds an in-memory repository with one SKU per strategy type, prices each
of them through the orchestrator and prints the resulting DynamicPrice rows.
"""

import asyncio
from datetime import datetime, timedelta

from agents.pricing_orchestrator import PricingOrchestrator
from config.config import OrchestratorConfig
from connectors.pricing_repository import InMemoryPricingRepository
from models.api import PricingRequest
from models.enums import StrategyType
from models.pricing import (
    CompetitorPrice,
    CompetitorPriceInfo,
    PriceElasticity,
    PriceHistoryData,
    PricingStrategy,
    is_valid,
)
from utils.logger import get_logger

logger = get_logger("demos.dynamic_pricing_demo")

# Wednesday, outside peak hours
DEMO_NOW = datetime(2026, 10, 21, 3, 0)


def seed_repository(repo: InMemoryPricingRepository) -> None:
    """Reference data for the demo SKUs."""
    repo.add_competitor_price_info(
        CompetitorPriceInfo(
            sku_id="SKU-HEADPHONES",
            competitors=[
                CompetitorPrice("ShopA", 11000.0, "https://shop-a.example/hp"),
                CompetitorPrice("ShopB", 11800.0, "https://shop-b.example/hp"),
            ],
            last_updated=DEMO_NOW,
        )
    )
    repo.add_competitor_price_info(
        CompetitorPriceInfo(
            sku_id="SKU-KETTLE",
            competitors=[
                CompetitorPrice("ShopA", 42.0),
                CompetitorPrice("ShopB", 45.0),
                CompetitorPrice("ShopC", 48.0),
            ],
            last_updated=DEMO_NOW,
        )
    )
    repo.add_price_elasticity(PriceElasticity(sku_id="SKU-MUG", elasticity=1.2, data_points=14))
    repo.add_price_history(
        *[
            PriceHistoryData(
                sku_id="SKU-MUG",
                date=DEMO_NOW - timedelta(days=day),
                price=12.0 + (day % 3) - 1,
                quantity=40 - 3 * ((day % 3) - 1),
            )
            for day in range(1, 15)
        ]
    )


async def seed_strategies(orchestrator: PricingOrchestrator) -> None:
    await orchestrator.save_strategy(
        PricingStrategy(sku_id="SKU-KETTLE", strategy_type=StrategyType.COMPETITIVE, min_price=30.0, max_price=60.0)
    )
    await orchestrator.save_strategy(
        PricingStrategy(sku_id="SKU-MUG", strategy_type=StrategyType.PROFIT_MAXIMIZATION, min_price=8.0, max_price=20.0)
    )
    await orchestrator.save_strategy(
        PricingStrategy(sku_id="SKU-GIFTCARD", strategy_type=StrategyType.FIXED, min_price=50.0, max_price=50.0)
    )


async def demo_dynamic_pricing():
    logger.info("Starting dynamic pricing demo...")
    repo = InMemoryPricingRepository()
    seed_repository(repo)
    orchestrator = PricingOrchestrator(
        repo, config=OrchestratorConfig.from_env(), clock=lambda: DEMO_NOW
    )
    await seed_strategies(orchestrator)
    loaded = await orchestrator.reload_strategies()
    logger.info(f"Loaded {loaded} strategies into the cache.")

    requests = [
        # No stored strategy: composite factor model with default bounds
        PricingRequest(
            sku_id="SKU-HEADPHONES",
            base_price=10000.0,
            current_stock=5,
            total_stock=100,
            daily_demand=30.0,
            average_daily_demand=20.0,
            user_level="VIP",
        ),
        PricingRequest(sku_id="SKU-KETTLE", base_price=40.0),
        PricingRequest(sku_id="SKU-MUG", base_price=12.0),
        PricingRequest(sku_id="SKU-GIFTCARD", base_price=50.0),
    ]

    print("\n--- Dynamic Pricing Demo ---")
    for request in requests:
        price = await orchestrator.calculate_price(request)
        print(
            f"{price.sku_id:<15} {price.strategy_type.value:<20} "
            f"base {price.base_price:>9.2f} -> final {price.final_price:>9.2f} "
            f"(x{price.price_adjustment:.3f})"
        )
        print(
            f"{'':<15} factors: inventory {price.inventory_factor:.2f}, "
            f"demand {price.demand_factor:.2f}, competitor {price.competitor_factor:.2f}, "
            f"time {price.time_factor:.2f}, user {price.user_factor:.2f}"
        )

    latest = await orchestrator.get_latest_price("SKU-HEADPHONES")
    tomorrow = DEMO_NOW + timedelta(days=1)
    print(
        f"\nSKU-HEADPHONES valid now: {is_valid(latest, DEMO_NOW)}, "
        f"valid in 24h: {is_valid(latest, tomorrow)}"
    )

    page = await orchestrator.list_strategies(page=1, page_size=2)
    print(f"Strategies page 1/{-(-page.total // page.page_size)}: {[s.sku_id for s in page.strategies]}")
    print("-----------------------------------------")
    logger.info("Dynamic pricing demo completed.")


if __name__ == "__main__":
    asyncio.run(demo_dynamic_pricing())
