"""
Strategy orchestrator for dynamic pricing.

Selects the pricing algorithm configured for a SKU, gathers its inputs from
the repository, runs the engine and persists the resulting DynamicPrice.
All repository reads happen before the engine is invoked; the only write is
the final save, and its failure is surfaced to the caller.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from agents.demand_estimator import demand_function
from agents.pricing_engine import PricingEngine
from config.config import FactorModelConfig, OrchestratorConfig
from connectors.pricing_repository import PricingRepository
from models.api import PricingRequest, StrategyPage
from models.enums import CompetitiveStrategy, CustomerTier, StrategyType
from models.errors import InvalidBoundsError, PriceNotFoundError
from models.pricing import (
    DynamicPrice,
    PricingFactors,
    PricingResult,
    PricingStrategy,
    is_valid,
)
from utils.logger import get_logger
from utils.strategy_cache import StrategyCache


def no_holidays(moment: datetime) -> bool:
    """Holiday calendar hook; no calendar service is wired in yet."""
    return False


class PricingOrchestrator:
    """
    Computes, persists and serves dynamic prices for SKUs.

    Args:
        repository: Storage for strategies, reference data and prices.
        config: Policy constants (cost ratio, validity window, limits).
        clock: Returns "now"; injectable for tests.
        strategy_cache: Optional pre-loaded strategy table, consulted
            before the repository.
        holiday_calendar: Returns True when a moment falls on a holiday.
    """

    def __init__(
        self,
        repository: PricingRepository,
        config: OrchestratorConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
        strategy_cache: StrategyCache | None = None,
        holiday_calendar: Callable[[datetime], bool] = no_holidays,
    ):
        self.repository = repository
        self.config = config or OrchestratorConfig()
        self.clock = clock
        self.strategy_cache = strategy_cache
        self.holiday_calendar = holiday_calendar
        self.logger = get_logger(self.__class__.__name__)

    # --- Strategy resolution --- #

    def default_strategy(self, sku_id: str, base_price: float) -> PricingStrategy:
        engine_cfg = self.config.engine
        return PricingStrategy(
            sku_id=sku_id,
            strategy_type=StrategyType.DYNAMIC,
            min_price=base_price * engine_cfg.default_min_ratio,
            max_price=base_price * engine_cfg.default_max_ratio,
        )

    async def _load_strategy(self, sku_id: str) -> PricingStrategy | None:
        if self.strategy_cache is not None and self.strategy_cache.loaded:
            return self.strategy_cache.get(sku_id)
        return await self.repository.get_pricing_strategy(sku_id)

    async def resolve_strategy(self, sku_id: str, base_price: float) -> PricingStrategy:
        """
        Stored strategy with unset bounds defaulted to 0.5x / 2x base price.
        Missing or disabled strategies fall back to the default dynamic one.
        """
        strategy = await self._load_strategy(sku_id)
        if strategy is None or not strategy.enabled:
            reason = "not found" if strategy is None else "disabled"
            self.logger.warning(
                f"Strategy for SKU {sku_id} {reason}; using default dynamic pricing."
            )
            return self.default_strategy(sku_id, base_price)

        default = self.default_strategy(sku_id, base_price)
        resolved = replace(
            strategy,
            min_price=strategy.min_price or default.min_price,
            max_price=strategy.max_price or default.max_price,
        )
        if resolved.min_price > resolved.max_price:
            raise InvalidBoundsError(resolved.min_price, resolved.max_price)
        return resolved

    def factor_config_for(self, strategy: PricingStrategy) -> FactorModelConfig:
        """Factor settings with the strategy's inventory threshold and competitor offset applied."""
        cfg = replace(
            self.config.factors,
            competitor_price_offset=strategy.competitor_price_offset,
        )
        if strategy.inventory_threshold > 0:
            cfg = replace(cfg, low_stock_ratio=strategy.inventory_threshold / 100.0)
        return cfg

    # --- Price computation --- #

    async def calculate_price(self, request: PricingRequest) -> DynamicPrice:
        """
        Compute and persist a DynamicPrice for ``request.sku_id``.

        Raises:
            InvalidBoundsError: The strategy's floor is above its ceiling.
            Exception: Any repository write failure, unchanged.
        """
        strategy = await self.resolve_strategy(request.sku_id, request.base_price)

        elasticity = 1.0
        stored_elasticity = await self.repository.get_price_elasticity(request.sku_id)
        if stored_elasticity is not None:
            elasticity = stored_elasticity.elasticity

        engine = PricingEngine(
            request.base_price,
            strategy.min_price,
            strategy.max_price,
            elasticity,
            factor_config=self.factor_config_for(strategy),
            config=self.config.engine,
        )
        now = self.clock()

        match strategy.strategy_type:
            case StrategyType.PROFIT_MAXIMIZATION:
                result = await self._price_for_profit(engine, request)
            case StrategyType.COMPETITIVE:
                result = await self._price_competitively(engine, request)
            case StrategyType.FIXED:
                result = PricingResult(final_price=engine.fallback_price())
            case _:
                result = await self._price_dynamically(engine, request, now)

        price = DynamicPrice(
            sku_id=request.sku_id,
            base_price=request.base_price,
            final_price=result.final_price,
            price_adjustment=price_adjustment(result.final_price, request.base_price),
            effective_time=now,
            expiry_time=now + self.config.validity,
            inventory_factor=result.inventory_factor,
            demand_factor=result.demand_factor,
            competitor_factor=result.competitor_factor,
            time_factor=result.time_factor,
            user_factor=result.user_factor,
            strategy_type=strategy.strategy_type,
        )

        try:
            stored = await self.repository.save_dynamic_price(price)
        except Exception as e:
            self.logger.error(f"Failed to save dynamic price for SKU {request.sku_id}: {e}")
            raise

        self.logger.info(
            f"Dynamic price for SKU {request.sku_id}: {stored.final_price:.2f} "
            f"(base {request.base_price:.2f}, strategy {strategy.strategy_type.value})"
        )
        return stored

    async def _price_for_profit(self, engine: PricingEngine, request: PricingRequest) -> PricingResult:
        history = await self.repository.get_price_history(
            request.sku_id, self.config.history_limit
        )
        demand_fn = demand_function(
            [h.to_demand_data() for h in history],
            engine.elasticity,
            baseline_demand=self.config.engine.baseline_demand,
            max_points=self.config.history_limit,
        )
        cost = request.base_price * self.config.cost_ratio
        final_price = engine.optimal_price_for_profit(cost, demand_fn)
        self.logger.debug(
            f"Profit search for SKU {request.sku_id}: cost {cost:.2f}, "
            f"{len(history)} history points -> {final_price:.2f}"
        )
        return PricingResult(final_price=final_price)

    async def _price_competitively(self, engine: PricingEngine, request: PricingRequest) -> PricingResult:
        info = await self.repository.get_competitor_price_info(request.sku_id)
        prices = info.prices if info is not None else []
        final_price = engine.competitive_pricing(prices, CompetitiveStrategy.AVERAGE)
        return PricingResult(
            final_price=final_price,
            competitor_factor=price_adjustment(final_price, request.base_price),
        )

    async def _price_dynamically(
        self, engine: PricingEngine, request: PricingRequest, now: datetime
    ) -> PricingResult:
        competitor_price = request.competitor_price
        if competitor_price <= 0:
            info = await self.repository.get_competitor_price_info(request.sku_id)
            if info is not None:
                competitor_price = info.lowest_price

        factors = PricingFactors(
            stock=request.current_stock,
            total_stock=request.total_stock,
            demand_level=demand_level(request.daily_demand, request.average_daily_demand),
            competitor_price=competitor_price,
            time_of_day=now.hour,
            day_of_week=now.isoweekday() % 7,
            is_holiday=self.holiday_calendar(now),
            user_level=CustomerTier.level_for(request.user_level),
            season_factor=self.config.neutral_season_factor,
        )
        return engine.calculate_price(factors)

    # --- Reads --- #

    async def get_latest_price(self, sku_id: str) -> DynamicPrice:
        """
        Most recently persisted price for a SKU, whether or not it has expired.
        Callers check validity with ``is_valid``.
        """
        price = await self.repository.get_latest_dynamic_price(sku_id)
        if price is None:
            raise PriceNotFoundError(sku_id)
        return price

    async def get_valid_price(self, sku_id: str) -> DynamicPrice | None:
        """Latest price if it is still inside its validity window, else None."""
        price = await self.repository.get_latest_dynamic_price(sku_id)
        if price is None or not is_valid(price, self.clock()):
            return None
        return price

    # --- Strategy management --- #

    async def save_strategy(self, strategy: PricingStrategy) -> PricingStrategy:
        """Create or update a strategy. Repository errors propagate unchanged."""
        if strategy.min_price and strategy.max_price and strategy.min_price > strategy.max_price:
            raise InvalidBoundsError(strategy.min_price, strategy.max_price)
        stored = await self.repository.save_pricing_strategy(strategy)
        if self.strategy_cache is not None and self.strategy_cache.loaded:
            self.strategy_cache.with_strategy(stored, loaded_at=self.clock())
        action = "Created" if strategy.id is None else "Updated"
        self.logger.info(
            f"{action} strategy {stored.id} for SKU {stored.sku_id} ({stored.strategy_type.value})"
        )
        return stored

    async def list_strategies(self, page: int = 1, page_size: int | None = None) -> StrategyPage:
        page = max(page, 1)
        if page_size is None or page_size < 1:
            page_size = self.config.default_page_size
        strategies, total = await self.repository.list_pricing_strategies(
            (page - 1) * page_size, page_size
        )
        return StrategyPage(strategies=strategies, total=total, page=page, page_size=page_size)

    async def reload_strategies(self) -> int:
        """Load every stored strategy and swap it into the cache in one step."""
        if self.strategy_cache is None:
            self.strategy_cache = StrategyCache()
        strategies: list[PricingStrategy] = []
        page_size = self.config.default_page_size
        offset = 0
        while True:
            batch, total = await self.repository.list_pricing_strategies(offset, page_size)
            strategies.extend(batch)
            offset += len(batch)
            if not batch or offset >= total:
                break
        self.strategy_cache.replace(strategies, loaded_at=self.clock())
        return len(strategies)


def demand_level(daily_demand: float, average_daily_demand: float) -> float:
    """Demand ratio scaled so that average demand maps to 0.5."""
    if average_daily_demand > 0:
        return 0.5 * daily_demand / average_daily_demand
    return 0.5


def price_adjustment(final_price: float, base_price: float) -> float:
    """final / base, defined as 1.0 for a zero base price."""
    if base_price > 0:
        return final_price / base_price
    return 1.0
