"""
Goods, Supply Levels and Markets - Compute Wars

The commodities a trader can move and the four hubs that price them.
Pure configuration: nothing in this module changes during a game.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Good:
    """A tradeable commodity."""

    good_id: str
    name: str
    full_name: str
    icon: str
    base_min: int
    base_max: int
    volatility: str
    description: str

    @property
    def midpoint(self) -> float:
        return (self.base_min + self.base_max) / 2


@dataclass(frozen=True)
class SupplyLevel:
    """Discrete supply tier: sets price volatility and a price bias."""

    level_id: str
    name: str
    icon: str
    volatility: float
    price_multiplier: float


@dataclass(frozen=True)
class Restriction:
    """Static customs restriction for one good in one market."""

    seizure_risk: float
    price_premium: float


@dataclass(frozen=True)
class Market:
    """A trading hub with its own modifiers and customs regime."""

    market_id: str
    name: str
    subtitle: str
    price_modifiers: Dict[str, float]
    customs_risk: float
    description: str
    restricted_goods: Dict[str, Restriction] = field(default_factory=dict)

    def modifier(self, good_id: str) -> float:
        return self.price_modifiers.get(good_id, 1.0)


# =============================================================================
# GOODS
# =============================================================================

GOODS: Dict[str, Good] = {
    'h100': Good(
        good_id='h100',
        name='H100',
        full_name='NVIDIA H100 GPU',
        icon='[■■■]',
        base_min=25000,
        base_max=40000,
        volatility='medium',
        description='Current-gen datacenter GPU. High volume, stable.',
    ),
    'h200': Good(
        good_id='h200',
        name='H200',
        full_name='NVIDIA H200 GPU',
        icon='[■■□]',
        base_min=30000,
        base_max=50000,
        volatility='medium',
        description='Next-gen GPU. More volatile pricing.',
    ),
    'b100': Good(
        good_id='b100',
        name='B100',
        full_name='NVIDIA B100 GPU',
        icon='[■□□]',
        base_min=40000,
        base_max=80000,
        volatility='high',
        description='Bleeding edge. Very volatile, high risk/reward.',
    ),
    'compute': Good(
        good_id='compute',
        name='Compute',
        full_name='Cloud GPU Hours',
        icon='[≡≡≡]',
        base_min=500,
        base_max=2000,
        volatility='low',
        description='Bulk GPU hours (units of 1000). Low margin.',
    ),
    'datasets': Good(
        good_id='datasets',
        name='Datasets',
        full_name='Training Data',
        icon='[◆◆◆]',
        base_min=10000,
        base_max=30000,
        volatility='medium',
        description='Licensed datasets. Affected by regulations.',
    ),
    'talent': Good(
        good_id='talent',
        name='Talent',
        full_name='AI Researcher',
        icon='[☺☺☺]',
        base_min=50000,
        base_max=150000,
        volatility='high',
        description='Talent contracts. Rare, high value.',
    ),
}

GPU_GOODS = ('h100', 'h200', 'b100')


# =============================================================================
# SUPPLY LEVELS
# Ordered from most to least plentiful; shifts move one step along this list.
# =============================================================================

SUPPLY_LEVELS: Dict[str, SupplyLevel] = {
    'surplus': SupplyLevel('surplus', 'Surplus', '[▼▼▼]', volatility=0.05, price_multiplier=0.85),
    'normal': SupplyLevel('normal', 'Normal', '[═══]', volatility=0.10, price_multiplier=1.0),
    'shortage': SupplyLevel('shortage', 'Shortage', '[▲▲▲]', volatility=0.20, price_multiplier=1.20),
}

SUPPLY_ORDER: List[str] = ['surplus', 'normal', 'shortage']


# =============================================================================
# MARKETS
# =============================================================================

MARKETS: Dict[str, Market] = {
    'us-west': Market(
        market_id='us-west',
        name='US West Coast',
        subtitle='Silicon Valley · High Regulations',
        price_modifiers={
            'h100': 1.0, 'h200': 1.0, 'b100': 1.0,
            'compute': 0.9,
            'datasets': 1.0,
            'talent': 1.1,
        },
        customs_risk=0.05,
        description='Stable prices, high volume, strict regulations.',
    ),
    'eu-central': Market(
        market_id='eu-central',
        name='EU Central',
        subtitle='Frankfurt · GDPR Zone',
        price_modifiers={
            'h100': 0.95, 'h200': 0.95, 'b100': 0.95,
            'compute': 1.0,
            'datasets': 1.4,   # GDPR scarcity
            'talent': 1.0,
        },
        customs_risk=0.08,
        restricted_goods={
            'datasets': Restriction(seizure_risk=0.25, price_premium=1.4),
        },
        description='Data privacy restrictions. Datasets risky but lucrative.',
    ),
    'china-east': Market(
        market_id='china-east',
        name='China East',
        subtitle='Shanghai · Export Controls',
        price_modifiers={
            'h100': 1.5, 'h200': 1.6, 'b100': 1.8,
            'compute': 0.9,
            'datasets': 1.0,
            'talent': 0.85,
        },
        customs_risk=0.15,
        restricted_goods={
            'h100': Restriction(seizure_risk=0.30, price_premium=1.5),
            'h200': Restriction(seizure_risk=0.35, price_premium=1.6),
            'b100': Restriction(seizure_risk=0.45, price_premium=1.8),
        },
        description='Export controls on GPUs. High risk, high reward.',
    ),
    'singapore': Market(
        market_id='singapore',
        name='Singapore',
        subtitle='Trading Hub · Low Restrictions',
        price_modifiers={
            'h100': 1.1, 'h200': 1.1, 'b100': 1.1,
            'compute': 1.1,
            'datasets': 1.1,
            'talent': 1.15,
        },
        customs_risk=0.03,
        description='Trading hub, no restrictions, premium prices.',
    ),
}


def get_good(good_id: str) -> Optional[Good]:
    """Look up a good by id."""
    return GOODS.get(good_id)


def get_market(market_id: str) -> Optional[Market]:
    """Look up a market by id."""
    return MARKETS.get(market_id)


def list_goods() -> List[str]:
    return list(GOODS.keys())


def list_markets() -> List[str]:
    return list(MARKETS.keys())
