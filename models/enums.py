"""
Centralized Enum definitions for the pricing engine.
"""

from enum import Enum


class StrategyType(str, Enum):
    """Pricing algorithm selected for a SKU"""

    DYNAMIC = "dynamic"
    PROFIT_MAXIMIZATION = "profit_maximization"
    COMPETITIVE = "competitive"
    FIXED = "fixed"


class CompetitiveStrategy(str, Enum):
    """Ways of positioning against competitor prices"""

    AVERAGE = "average"  # Match the mean competitor price
    LOWEST = "lowest"  # Undercut the cheapest competitor by 5%
    PREMIUM = "premium"  # Sit 10% above the mean


class ElasticityType(str, Enum):
    """Classification of a price elasticity coefficient"""

    ELASTIC = "elastic"
    INELASTIC = "inelastic"
    UNIT = "unit"


class CustomerTier(str, Enum):
    """Loyalty tiers known to the user factor"""

    DIAMOND = "Diamond"
    VIP = "VIP"
    GOLD = "Gold"
    SILVER = "Silver"
    STANDARD = "Standard"

    @property
    def level(self) -> int:
        """Ordinal user level (1-10) used by the user factor."""
        return _TIER_LEVELS[self]

    @classmethod
    def level_for(cls, tier_name: str | None) -> int:
        """Map a tier name to its ordinal; unknown or missing names map to 1."""
        try:
            return cls(tier_name).level
        except ValueError:
            return 1


# Diamond ranks above VIP. Keep this ordering unless pricing ops agree otherwise.
_TIER_LEVELS = {
    CustomerTier.DIAMOND: 10,
    CustomerTier.VIP: 9,
    CustomerTier.GOLD: 7,
    CustomerTier.SILVER: 5,
    CustomerTier.STANDARD: 1,
}
