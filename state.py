"""
Compute Wars - Game State

The single mutable root of a game. The engine never mutates a state it was
handed: every resolution pass works on snapshot() and returns the copy.

This module owns:
- GameState and its component dataclasses
- The new-game initializer
- Plain-dict (JSON-safe) serialization
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any, List
import copy

from world import GOODS, MARKETS, MILESTONES, ChoiceType, EffectKind, EventCategory, get_milestone
from world.config import (
    STARTING_BALANCE,
    STARTING_INVENTORY_CAPACITY,
    STARTING_LOCATION,
    STARTING_REPUTATION,
    DEBT_BASE_INTEREST_RATE,
    MIN_REPUTATION,
    MAX_REPUTATION,
)


def round_half_up(value) -> int:
    """Round to whole currency units, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


# =============================================================================
# COMPONENT DATACLASSES
# =============================================================================

@dataclass
class PlayerState:
    """The trader: cash, debt, cargo and standing."""

    balance: int = STARTING_BALANCE
    debt: int = 0
    debt_interest_rate: float = DEBT_BASE_INTEREST_RATE
    location: str = STARTING_LOCATION
    inventory: Dict[str, int] = field(default_factory=dict)
    cost_basis: Dict[str, float] = field(default_factory=dict)  # total paid per held good
    inventory_capacity: int = STARTING_INVENTORY_CAPACITY
    reputation: int = STARTING_REPUTATION

    def add_goods(self, good_id: str, quantity: int, total_cost: float):
        self.inventory[good_id] = self.inventory.get(good_id, 0) + quantity
        self.cost_basis[good_id] = self.cost_basis.get(good_id, 0) + total_cost

    def remove_goods(self, good_id: str, quantity: int) -> int:
        """
        Take up to `quantity` units out of the hold.

        Cost basis shrinks by the same fraction as the quantity, so the
        average cost of whatever remains is unchanged. Entries that reach
        zero are dropped from both maps.

        Returns:
            Units actually removed
        """
        held = self.inventory.get(good_id, 0)
        removed = min(quantity, held)
        if removed <= 0:
            return 0

        remaining = held - removed
        if remaining == 0:
            self.inventory.pop(good_id, None)
            self.cost_basis.pop(good_id, None)
        else:
            self.inventory[good_id] = remaining
            self.cost_basis[good_id] = self.cost_basis.get(good_id, 0) * (remaining / held)
        return removed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'balance': self.balance,
            'debt': self.debt,
            'debt_interest_rate': self.debt_interest_rate,
            'location': self.location,
            'inventory': dict(self.inventory),
            'cost_basis': dict(self.cost_basis),
            'inventory_capacity': self.inventory_capacity,
            'reputation': self.reputation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerState':
        return cls(
            balance=data['balance'],
            debt=data.get('debt', 0),
            debt_interest_rate=data.get('debt_interest_rate', DEBT_BASE_INTEREST_RATE),
            location=data['location'],
            inventory=dict(data.get('inventory', {})),
            cost_basis=dict(data.get('cost_basis', {})),
            inventory_capacity=data.get('inventory_capacity', STARTING_INVENTORY_CAPACITY),
            reputation=data.get('reputation', STARTING_REPUTATION),
        )


@dataclass
class MarketState:
    """Live prices, supply tiers and regulation status of one market."""

    market_id: str
    name: str
    subtitle: str
    prices: Dict[str, int] = field(default_factory=dict)
    supply: Dict[str, str] = field(default_factory=dict)
    price_history: Dict[str, List[int]] = field(default_factory=dict)
    restricted: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'market_id': self.market_id,
            'name': self.name,
            'subtitle': self.subtitle,
            'prices': dict(self.prices),
            'supply': dict(self.supply),
            'price_history': {good: list(h) for good, h in self.price_history.items()},
            'restricted': list(self.restricted),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MarketState':
        return cls(
            market_id=data['market_id'],
            name=data.get('name', ''),
            subtitle=data.get('subtitle', ''),
            prices=dict(data['prices']),
            supply=dict(data.get('supply', {})),
            # Saves from before price history existed start with an empty ring
            price_history={good: list(h) for good, h in data.get('price_history', {}).items()},
            restricted=list(data.get('restricted', [])),
        )


@dataclass
class GameEvent:
    """A materialized random event (or a deferred offer / intel tip)."""

    event_id: str
    category: EventCategory
    title: str
    description: str
    effect: EffectKind
    good: Optional[str] = None
    market: Optional[str] = None
    percent: Optional[int] = None
    quantity: Optional[int] = None
    amount: Optional[int] = None
    turn: Optional[int] = None
    direction: Optional[str] = None
    turns_remaining: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_id': self.event_id,
            'category': self.category.value,
            'title': self.title,
            'description': self.description,
            'effect': self.effect.value,
            'good': self.good,
            'market': self.market,
            'percent': self.percent,
            'quantity': self.quantity,
            'amount': self.amount,
            'turn': self.turn,
            'direction': self.direction,
            'turns_remaining': self.turns_remaining,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameEvent':
        data = dict(data)
        data['category'] = EventCategory(data['category'])
        data['effect'] = EffectKind(data['effect'])
        return cls(**data)


@dataclass
class ChoiceEvent:
    """An encounter waiting on a player decision."""

    event_id: str
    choice_type: ChoiceType
    title: str
    text: str
    risk_text: str
    choices: List[Dict[str, str]]
    params: Dict[str, Any]
    destination: Optional[str] = None

    def choice_ids(self) -> List[str]:
        return [c['id'] for c in self.choices]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_id': self.event_id,
            'choice_type': self.choice_type.value,
            'title': self.title,
            'text': self.text,
            'risk_text': self.risk_text,
            'choices': [dict(c) for c in self.choices],
            'params': dict(self.params),
            'destination': self.destination,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChoiceEvent':
        data = dict(data)
        data['choice_type'] = ChoiceType(data['choice_type'])
        return cls(**data)


@dataclass
class MilestoneProgress:
    """Per-game achievement status. achieved only ever goes False -> True."""

    milestone_id: str
    achieved: bool = False
    achieved_on_turn: Optional[int] = None

    @property
    def definition(self):
        return get_milestone(self.milestone_id)

    def to_dict(self) -> Dict[str, Any]:
        milestone = self.definition
        return {
            'milestone_id': self.milestone_id,
            'name': milestone.name,
            'description': milestone.description,
            'achieved': self.achieved,
            'achieved_on_turn': self.achieved_on_turn,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MilestoneProgress':
        return cls(
            milestone_id=data['milestone_id'],
            achieved=data.get('achieved', False),
            achieved_on_turn=data.get('achieved_on_turn'),
        )


@dataclass
class Stats:
    """Counters feeding the milestone conditions."""

    total_trades: int = 0
    goods_traded: int = 0
    markets_visited: List[str] = field(default_factory=lambda: [STARTING_LOCATION])
    had_debt: bool = False
    peak_net_worth: int = STARTING_BALANCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_trades': self.total_trades,
            'goods_traded': self.goods_traded,
            'markets_visited': list(self.markets_visited),
            'had_debt': self.had_debt,
            'peak_net_worth': self.peak_net_worth,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Stats':
        return cls(
            total_trades=data.get('total_trades', 0),
            goods_traded=data.get('goods_traded', 0),
            markets_visited=list(data.get('markets_visited', [STARTING_LOCATION])),
            had_debt=data.get('had_debt', False),
            peak_net_worth=data.get('peak_net_worth', STARTING_BALANCE),
        )


# =============================================================================
# GAME STATE
# =============================================================================

@dataclass
class GameState:
    """
    Complete game state.

    Owned by the caller between actions. The engine takes a snapshot,
    resolves one action against it, and hands the snapshot back.
    """

    player: PlayerState
    markets: Dict[str, MarketState]
    turn: int = 1
    milestones: Dict[str, MilestoneProgress] = field(default_factory=dict)
    unlocked_upgrades: List[str] = field(default_factory=list)
    purchased_upgrades: List[str] = field(default_factory=list)
    pending_events: List[GameEvent] = field(default_factory=list)

    # Encounter in progress: while set, only resolveChoice is accepted
    pending_choice: Optional[ChoiceEvent] = None
    pending_destination: Optional[str] = None
    smuggled_this_trip: bool = False

    oracle_prediction: Optional[Dict[str, Any]] = None
    stats: Stats = field(default_factory=Stats)

    game_over: bool = False
    game_over_reason: Optional[str] = None

    def __post_init__(self):
        self._clamp_all_values()

    def _clamp_all_values(self):
        """Keep bounded fields inside their valid ranges."""
        self.player.reputation = max(MIN_REPUTATION, min(MAX_REPUTATION, int(self.player.reputation)))
        self.player.debt = max(0, self.player.debt)

    def has_upgrade(self, upgrade_id: str) -> bool:
        return upgrade_id in self.purchased_upgrades

    def current_market(self) -> MarketState:
        return self.markets[self.player.location]

    def snapshot(self) -> 'GameState':
        """Independent deep copy; mutating it never touches self."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize state to a JSON-safe dictionary."""
        return {
            'player': self.player.to_dict(),
            'markets': {market_id: m.to_dict() for market_id, m in self.markets.items()},
            'turn': self.turn,
            'milestones': {mid: m.to_dict() for mid, m in self.milestones.items()},
            'unlocked_upgrades': list(self.unlocked_upgrades),
            'purchased_upgrades': list(self.purchased_upgrades),
            'pending_events': [e.to_dict() for e in self.pending_events],
            'pending_choice': self.pending_choice.to_dict() if self.pending_choice else None,
            'pending_destination': self.pending_destination,
            'smuggled_this_trip': self.smuggled_this_trip,
            'oracle_prediction': dict(self.oracle_prediction) if self.oracle_prediction else None,
            'stats': self.stats.to_dict(),
            'game_over': self.game_over,
            'game_over_reason': self.game_over_reason,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameState':
        """Deserialize state from dictionary."""
        milestones = {
            mid: MilestoneProgress.from_dict(m) for mid, m in data.get('milestones', {}).items()
        }
        # Milestones added after the save was written start unachieved
        for mid in MILESTONES:
            milestones.setdefault(mid, MilestoneProgress(mid))

        pending_choice = data.get('pending_choice')
        return cls(
            player=PlayerState.from_dict(data['player']),
            markets={mid: MarketState.from_dict(m) for mid, m in data['markets'].items()},
            turn=data['turn'],
            milestones=milestones,
            unlocked_upgrades=list(data.get('unlocked_upgrades', [])),
            purchased_upgrades=list(data.get('purchased_upgrades', [])),
            pending_events=[GameEvent.from_dict(e) for e in data.get('pending_events', [])],
            pending_choice=ChoiceEvent.from_dict(pending_choice) if pending_choice else None,
            pending_destination=data.get('pending_destination'),
            smuggled_this_trip=data.get('smuggled_this_trip', False),
            oracle_prediction=data.get('oracle_prediction'),
            stats=Stats.from_dict(data.get('stats', {})),
            game_over=data.get('game_over', False),
            game_over_reason=data.get('game_over_reason'),
        )


# =============================================================================
# NEW GAME FACTORY
# =============================================================================

def create_initial_state() -> GameState:
    """Create the opening state: every market at its midpoint price, all supply normal."""
    markets = {}
    for market_id, market in MARKETS.items():
        prices = {}
        supply = {}
        price_history = {}
        for good_id, good in GOODS.items():
            initial_price = round_half_up(good.midpoint * market.modifier(good_id))
            prices[good_id] = initial_price
            supply[good_id] = 'normal'
            price_history[good_id] = [initial_price]

        markets[market_id] = MarketState(
            market_id=market_id,
            name=market.name,
            subtitle=market.subtitle,
            prices=prices,
            supply=supply,
            price_history=price_history,
        )

    return GameState(
        player=PlayerState(),
        markets=markets,
        turn=1,
        milestones={mid: MilestoneProgress(mid) for mid in MILESTONES},
        stats=Stats(markets_visited=[STARTING_LOCATION], peak_net_worth=STARTING_BALANCE),
    )
