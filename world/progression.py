"""
Upgrades and Milestones - Compute Wars

Purchasable operation upgrades and the one-time achievements that gate
or reward them.
"""

from typing import Dict, Optional, Union
from dataclasses import dataclass
from enum import Enum


class UpgradeEffectType(str, Enum):
    INVENTORY = 'inventory'
    REPUTATION = 'reputation'
    CUSTOMS_PROTECTION = 'customs_protection'
    HACK_PROTECTION = 'hack_protection'


class ConditionKind(str, Enum):
    NET_WORTH = 'net_worth'
    TRADES = 'trades'
    MARKETS_VISITED = 'markets_visited'
    GOODS_TRADED = 'goods_traded'
    TURNS = 'turns'
    PAID_OFF_DEBT = 'paid_off_debt'


class RewardKind(str, Enum):
    UNLOCK_UPGRADE = 'unlock_upgrade'
    REPUTATION = 'reputation'
    ACHIEVEMENT = 'achievement'
    TUTORIAL = 'tutorial'


@dataclass(frozen=True)
class Upgrade:
    upgrade_id: str
    name: str
    cost: int
    effect_type: UpgradeEffectType
    effect_value: float
    description: str
    prerequisite: Optional[str] = None
    unlocked_by_milestone: Optional[str] = None


@dataclass(frozen=True)
class Milestone:
    milestone_id: str
    name: str
    condition: ConditionKind
    threshold: Union[int, bool]
    reward: RewardKind
    reward_value: Union[int, str]
    description: str


# =============================================================================
# UPGRADES
# =============================================================================

UPGRADES: Dict[str, Upgrade] = {
    'cargo_1': Upgrade(
        upgrade_id='cargo_1',
        name='Cargo Expansion I',
        cost=50000,
        effect_type=UpgradeEffectType.INVENTORY,
        effect_value=5,
        description='+5 inventory slots',
    ),
    'cargo_2': Upgrade(
        upgrade_id='cargo_2',
        name='Cargo Expansion II',
        cost=150000,
        effect_type=UpgradeEffectType.INVENTORY,
        effect_value=10,
        prerequisite='cargo_1',
        description='+10 inventory slots',
    ),
    'cargo_3': Upgrade(
        upgrade_id='cargo_3',
        name='Cargo Expansion III',
        cost=500000,
        effect_type=UpgradeEffectType.INVENTORY,
        effect_value=20,
        prerequisite='cargo_2',
        description='+20 inventory slots',
    ),
    'reputation_1': Upgrade(
        upgrade_id='reputation_1',
        name='Industry Contacts',
        cost=100000,
        effect_type=UpgradeEffectType.REPUTATION,
        effect_value=10,
        description='+10 reputation',
    ),
    'reputation_2': Upgrade(
        upgrade_id='reputation_2',
        name='Board Connections',
        cost=300000,
        effect_type=UpgradeEffectType.REPUTATION,
        effect_value=20,
        prerequisite='reputation_1',
        description='+20 reputation',
    ),
    'insurance': Upgrade(
        upgrade_id='insurance',
        name='Cargo Insurance',
        cost=200000,
        effect_type=UpgradeEffectType.CUSTOMS_PROTECTION,
        effect_value=0.5,
        unlocked_by_milestone='series_a',
        description='50% chance to avoid customs seizure',
    ),
    'security': Upgrade(
        upgrade_id='security',
        name='Cybersecurity Suite',
        cost=150000,
        effect_type=UpgradeEffectType.HACK_PROTECTION,
        effect_value=0.5,
        unlocked_by_milestone='survivor',
        description='50% chance to avoid hack events',
    ),
}


# =============================================================================
# MILESTONES
# =============================================================================

MILESTONES: Dict[str, Milestone] = {
    # Wealth
    'seed_round': Milestone(
        'seed_round', 'Seed Round', ConditionKind.NET_WORTH, 100000,
        RewardKind.UNLOCK_UPGRADE, 'cargo_1', 'Reach $100,000 net worth',
    ),
    'series_a': Milestone(
        'series_a', 'Series A', ConditionKind.NET_WORTH, 500000,
        RewardKind.UNLOCK_UPGRADE, 'insurance', 'Reach $500,000 net worth',
    ),
    'series_b': Milestone(
        'series_b', 'Series B', ConditionKind.NET_WORTH, 1000000,
        RewardKind.UNLOCK_UPGRADE, 'reputation_2', 'Reach $1,000,000 net worth',
    ),
    'unicorn': Milestone(
        'unicorn', 'Unicorn', ConditionKind.NET_WORTH, 10000000,
        RewardKind.ACHIEVEMENT, 'unicorn_badge', 'Reach $10,000,000 net worth',
    ),
    'decacorn': Milestone(
        'decacorn', 'Decacorn', ConditionKind.NET_WORTH, 100000000,
        RewardKind.ACHIEVEMENT, 'decacorn_badge', 'Reach $100,000,000 net worth',
    ),
    # Activity
    'first_trade': Milestone(
        'first_trade', 'First Trade', ConditionKind.TRADES, 1,
        RewardKind.TUTORIAL, 'complete', 'Complete your first buy or sell',
    ),
    'globetrotter': Milestone(
        'globetrotter', 'Globetrotter', ConditionKind.MARKETS_VISITED, 4,
        RewardKind.REPUTATION, 5, 'Visit all 4 markets',
    ),
    'bulk_trader': Milestone(
        'bulk_trader', 'Bulk Trader', ConditionKind.GOODS_TRADED, 100,
        RewardKind.UNLOCK_UPGRADE, 'cargo_2', 'Trade 100 goods total',
    ),
    'survivor': Milestone(
        'survivor', 'Survivor', ConditionKind.TURNS, 50,
        RewardKind.UNLOCK_UPGRADE, 'security', 'Survive 50 turns',
    ),
    'debt_free': Milestone(
        'debt_free', 'Debt Free', ConditionKind.PAID_OFF_DEBT, True,
        RewardKind.REPUTATION, 10, 'Pay off all debt after borrowing',
    ),
}


def get_upgrade(upgrade_id: str) -> Optional[Upgrade]:
    return UPGRADES.get(upgrade_id)


def get_milestone(milestone_id: str) -> Optional[Milestone]:
    return MILESTONES.get(milestone_id)
