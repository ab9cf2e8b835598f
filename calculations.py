"""
Compute Wars - Calculations

Read-only derivations over a GameState: valuation, cost basis, debt
pricing and trade quotes. Nothing here mutates the state it is given.
"""

from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from state import GameState, GameEvent, PlayerState, round_half_up
from world import GOODS, MARKETS, EffectKind
from world.config import (
    DEBT_BASE_INTEREST_RATE,
    DEBT_MEDIUM_INTEREST_RATE,
    DEBT_HIGH_INTEREST_RATE,
    DEBT_MEDIUM_THRESHOLD,
    DEBT_HIGH_THRESHOLD,
    MAX_DEBT_MULTIPLIER,
)


@dataclass
class PriceQuote:
    """Effective trade price after any pending discount or premium."""

    price: int
    base_price: int
    percent: int = 0
    offer: Optional[GameEvent] = None


def inventory_used(inventory: Dict[str, int]) -> int:
    return sum(inventory.values())


def inventory_value(inventory: Dict[str, int], prices: Dict[str, int]) -> int:
    return sum(prices.get(good_id, 0) * quantity for good_id, quantity in inventory.items())


def net_worth(state: GameState) -> int:
    """Balance plus cargo valued at the current market, minus debt."""
    cargo = inventory_value(state.player.inventory, state.current_market().prices)
    return state.player.balance + cargo - state.player.debt


def average_cost(good_id: str, player: PlayerState) -> int:
    quantity = player.inventory.get(good_id, 0)
    if quantity == 0:
        return 0
    return round_half_up(player.cost_basis.get(good_id, 0) / quantity)


def debt_interest_rate(state: GameState) -> float:
    """Three-tier rate keyed by the debt / net worth ratio."""
    worth = net_worth(state)
    if worth <= 0:
        return DEBT_HIGH_INTEREST_RATE

    ratio = state.player.debt / worth
    if ratio >= DEBT_HIGH_THRESHOLD:
        return DEBT_HIGH_INTEREST_RATE
    if ratio >= DEBT_MEDIUM_THRESHOLD:
        return DEBT_MEDIUM_INTEREST_RATE
    return DEBT_BASE_INTEREST_RATE


def max_borrowable(state: GameState) -> int:
    worth = max(0, net_worth(state))
    return max(0, int(worth * MAX_DEBT_MULTIPLIER) - state.player.debt)


def find_offer(state: GameState, effect: EffectKind, good_id: str) -> Optional[GameEvent]:
    """First live discount/premium offer for a good, if any."""
    for event in state.pending_events:
        if event.effect == effect and event.good == good_id:
            return event
    return None


def effective_buy_price(state: GameState, good_id: str) -> PriceQuote:
    base_price = state.current_market().prices[good_id]
    offer = find_offer(state, EffectKind.DISCOUNT_BUY, good_id)
    if offer:
        return PriceQuote(
            price=round_half_up(base_price * (1 - offer.percent / 100)),
            base_price=base_price,
            percent=offer.percent,
            offer=offer,
        )
    return PriceQuote(price=base_price, base_price=base_price)


def effective_sell_price(state: GameState, good_id: str) -> PriceQuote:
    base_price = state.current_market().prices[good_id]
    offer = find_offer(state, EffectKind.PREMIUM_SELL, good_id)
    if offer:
        return PriceQuote(
            price=round_half_up(base_price * (1 + offer.percent / 100)),
            base_price=base_price,
            percent=offer.percent,
            offer=offer,
        )
    return PriceQuote(price=base_price, base_price=base_price)


def at_risk_goods(state: GameState, destination: str) -> List[Dict[str, Any]]:
    """Held goods that the destination's customs regime may seize."""
    market = MARKETS[destination]
    at_risk = []
    for good_id, restriction in market.restricted_goods.items():
        quantity = state.player.inventory.get(good_id, 0)
        if quantity > 0:
            at_risk.append({
                'good': good_id,
                'good_name': GOODS[good_id].name,
                'quantity': quantity,
                'seizure_risk': round_half_up(restriction.seizure_risk * 100),
                'price_premium': round_half_up((restriction.price_premium - 1) * 100),
            })
    return at_risk
