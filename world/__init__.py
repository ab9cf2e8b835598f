"""
Static world data for Compute Wars.

Goods, markets, supply levels, upgrades, milestones, event templates,
travel encounters, the oracle, and the tunable constants.
"""

from .goods import (
    GOODS,
    GPU_GOODS,
    MARKETS,
    SUPPLY_LEVELS,
    SUPPLY_ORDER,
    Good,
    Market,
    Restriction,
    SupplyLevel,
    get_good,
    get_market,
    list_goods,
    list_markets,
)

from .progression import (
    MILESTONES,
    UPGRADES,
    ConditionKind,
    Milestone,
    RewardKind,
    Upgrade,
    UpgradeEffectType,
    get_milestone,
    get_upgrade,
)

from .events import (
    CATEGORY_SHOCKS,
    EVENTS,
    TRAVEL_CHOICES,
    ChoiceOption,
    ChoiceType,
    EffectKind,
    EventCategory,
    EventDefinition,
    EventTemplate,
    TravelChoiceDefinition,
)

__all__ = [
    'GOODS',
    'GPU_GOODS',
    'MARKETS',
    'SUPPLY_LEVELS',
    'SUPPLY_ORDER',
    'Good',
    'Market',
    'Restriction',
    'SupplyLevel',
    'get_good',
    'get_market',
    'list_goods',
    'list_markets',
    'MILESTONES',
    'UPGRADES',
    'ConditionKind',
    'Milestone',
    'RewardKind',
    'Upgrade',
    'UpgradeEffectType',
    'get_milestone',
    'get_upgrade',
    'CATEGORY_SHOCKS',
    'EVENTS',
    'TRAVEL_CHOICES',
    'ChoiceOption',
    'ChoiceType',
    'EffectKind',
    'EventCategory',
    'EventDefinition',
    'EventTemplate',
    'TravelChoiceDefinition',
]
