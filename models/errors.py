"""
Exception types raised by the dynamic pricing engine and its repository layer.

Degenerate inputs (zero stock, empty history, no competitors) never raise;
they fall back to neutral factors. Only the cases below cross the
orchestrator boundary.
"""


class PricingError(Exception):
    """Base class for pricing engine errors."""


class InvalidBoundsError(PricingError, ValueError):
    """Raised when a price floor is above the price ceiling."""

    def __init__(self, min_price: float, max_price: float):
        self.min_price = min_price
        self.max_price = max_price
        super().__init__(
            f"Invalid price bounds: min_price {min_price} > max_price {max_price}"
        )


class PriceNotFoundError(PricingError, LookupError):
    """Raised when no dynamic price has ever been persisted for a SKU."""

    def __init__(self, sku_id: str):
        self.sku_id = sku_id
        super().__init__(f"No dynamic price found for SKU {sku_id}")


class StrategyNotFoundError(PricingError, LookupError):
    """Raised when updating a strategy id the repository does not know."""

    def __init__(self, strategy_id: int):
        self.strategy_id = strategy_id
        super().__init__(f"Pricing strategy {strategy_id} does not exist")


class PersistenceError(PricingError):
    """Raised by repository implementations when a write fails."""
