import pytest
from datetime import datetime, timedelta

from connectors.pricing_repository import InMemoryPricingRepository, PricingRepository
from models.enums import StrategyType
from models.errors import StrategyNotFoundError
from models.pricing import (
    CompetitorPrice,
    CompetitorPriceInfo,
    DynamicPrice,
    PriceElasticity,
    PriceHistoryData,
    PricingStrategy,
)

NOW = datetime(2026, 10, 21, 9, 0)


@pytest.fixture
def repo() -> InMemoryPricingRepository:
    """Provides an empty in-memory repository."""
    return InMemoryPricingRepository()


def make_price(sku_id: str, final_price: float, effective: datetime) -> DynamicPrice:
    return DynamicPrice(
        sku_id=sku_id,
        base_price=100.0,
        final_price=final_price,
        price_adjustment=final_price / 100.0,
        effective_time=effective,
        expiry_time=effective + timedelta(hours=24),
    )


def test_repository_contract_is_abstract():
    with pytest.raises(TypeError):
        PricingRepository()

# --- Strategies --- #

@pytest.mark.asyncio
async def test_unknown_lookups_return_none(repo):
    assert await repo.get_pricing_strategy("SKU-X") is None
    assert await repo.get_price_elasticity("SKU-X") is None
    assert await repo.get_competitor_price_info("SKU-X") is None
    assert await repo.get_latest_dynamic_price("SKU-X") is None
    assert await repo.get_price_history("SKU-X", 30) == []


@pytest.mark.asyncio
async def test_save_strategy_assigns_ids_and_updates(repo):
    first = await repo.save_pricing_strategy(PricingStrategy(sku_id="SKU-1"))
    second = await repo.save_pricing_strategy(PricingStrategy(sku_id="SKU-2"))
    assert (first.id, second.id) == (1, 2)

    first.strategy_type = StrategyType.COMPETITIVE
    updated = await repo.save_pricing_strategy(first)
    assert updated.id == 1
    stored = await repo.get_pricing_strategy("SKU-1")
    assert stored.strategy_type == StrategyType.COMPETITIVE


@pytest.mark.asyncio
async def test_returned_strategy_is_a_copy(repo):
    saved = await repo.save_pricing_strategy(PricingStrategy(sku_id="SKU-1", max_price=100))
    saved.max_price = 999
    assert (await repo.get_pricing_strategy("SKU-1")).max_price == 100


@pytest.mark.asyncio
async def test_update_unknown_strategy_raises(repo):
    with pytest.raises(StrategyNotFoundError):
        await repo.save_pricing_strategy(PricingStrategy(sku_id="SKU-1", id=7))


@pytest.mark.asyncio
async def test_list_strategies_ordered_by_id(repo):
    for sku in ("SKU-C", "SKU-A", "SKU-B"):
        await repo.save_pricing_strategy(PricingStrategy(sku_id=sku))
    rows, total = await repo.list_pricing_strategies(1, 5)
    assert total == 3
    assert [r.sku_id for r in rows] == ["SKU-A", "SKU-B"]

# --- Reference data --- #

@pytest.mark.asyncio
async def test_price_history_newest_first_and_limited(repo):
    rows = [
        PriceHistoryData(sku_id="SKU-1", date=NOW - timedelta(days=d), price=100.0 + d, quantity=10)
        for d in range(40)
    ]
    repo.add_price_history(*reversed(rows))
    history = await repo.get_price_history("SKU-1", 30)
    assert len(history) == 30
    assert history[0].date == NOW
    assert history[-1].date == NOW - timedelta(days=29)


@pytest.mark.asyncio
async def test_reference_data_round_trip(repo):
    repo.add_price_elasticity(PriceElasticity(sku_id="SKU-1", elasticity=1.8))
    repo.add_competitor_price_info(
        CompetitorPriceInfo(sku_id="SKU-1", competitors=[CompetitorPrice("ShopA", 90.0)])
    )
    assert (await repo.get_price_elasticity("SKU-1")).elasticity == 1.8
    assert (await repo.get_competitor_price_info("SKU-1")).lowest_price == 90.0

# --- Dynamic prices --- #

@pytest.mark.asyncio
async def test_dynamic_prices_are_append_only(repo):
    await repo.save_dynamic_price(make_price("SKU-1", 100.0, NOW))
    await repo.save_dynamic_price(make_price("SKU-1", 110.0, NOW + timedelta(hours=1)))
    rows = repo.dynamic_prices_for("SKU-1")
    assert [r.final_price for r in rows] == [100.0, 110.0]
    assert [r.id for r in rows] == [1, 2]


@pytest.mark.asyncio
async def test_latest_price_by_effective_time(repo):
    await repo.save_dynamic_price(make_price("SKU-1", 110.0, NOW + timedelta(hours=1)))
    await repo.save_dynamic_price(make_price("SKU-1", 100.0, NOW))
    latest = await repo.get_latest_dynamic_price("SKU-1")
    assert latest.final_price == 110.0


@pytest.mark.asyncio
async def test_latest_price_tie_goes_to_later_insert(repo):
    await repo.save_dynamic_price(make_price("SKU-1", 100.0, NOW))
    await repo.save_dynamic_price(make_price("SKU-1", 105.0, NOW))
    latest = await repo.get_latest_dynamic_price("SKU-1")
    assert latest.final_price == 105.0
    assert latest.id == 2
