"""
Compute Wars - Price & Supply Simulator

Moves every (market, good) price one step per turn: a bounded random walk
whose size depends on the supply tier, blended back toward a supply-adjusted
anchor, then clamped to the good's trading band.
"""

from typing import Dict
import logging

from chance import chance, roll_float
from state import GameState, round_half_up
from world import GOODS, MARKETS, SUPPLY_LEVELS, SUPPLY_ORDER
from world.config import (
    SUPPLY_SHIFT_CHANCE,
    PRICE_HISTORY_LENGTH,
    RANDOM_WALK_WEIGHT,
    MEAN_REVERSION_WEIGHT,
    PRICE_FLOOR_FACTOR,
    PRICE_CEILING_FACTOR,
)

logger = logging.getLogger(__name__)

PriceChanges = Dict[str, Dict[str, Dict[str, int]]]


def price_bounds(good_id: str, market_id: str):
    """Clamp band for a good in a market: [min x mod x 0.7, max x mod x 1.3]."""
    good = GOODS[good_id]
    modifier = MARKETS[market_id].modifier(good_id)
    return (
        round_half_up(good.base_min * modifier * PRICE_FLOOR_FACTOR),
        round_half_up(good.base_max * modifier * PRICE_CEILING_FACTOR),
    )


def anchor_price(good_id: str, market_id: str, supply_level: str) -> float:
    """Mean-reversion target for the current supply tier."""
    good = GOODS[good_id]
    modifier = MARKETS[market_id].modifier(good_id)
    return good.midpoint * modifier * SUPPLY_LEVELS[supply_level].price_multiplier


def record_price(history: Dict[str, list], good_id: str, price: int):
    """Push onto the good's history ring, evicting the oldest past the cap."""
    ring = history.setdefault(good_id, [])
    ring.append(price)
    del ring[:-PRICE_HISTORY_LENGTH]


def update_prices(state: GameState, rng) -> PriceChanges:
    """
    Advance every market one step.

    Returns:
        {market_id: {good_id: {'old': int, 'new': int}}}
    """
    price_changes: PriceChanges = {}

    for market_id, market in state.markets.items():
        price_changes[market_id] = {}

        for good_id in GOODS:
            supply = SUPPLY_LEVELS[market.supply[good_id]]
            old_price = market.prices[good_id]

            # 1. Random walk sized by supply volatility
            change = roll_float(rng, -supply.volatility, supply.volatility)
            walked = old_price * (1 + change)

            # 2. Pull toward the supply-adjusted anchor
            anchor = anchor_price(good_id, market_id, market.supply[good_id])
            blended = walked * RANDOM_WALK_WEIGHT + anchor * MEAN_REVERSION_WEIGHT

            # 3. Clamp to the trading band
            low, high = price_bounds(good_id, market_id)
            new_price = max(low, min(high, round_half_up(blended)))

            market.prices[good_id] = new_price
            price_changes[market_id][good_id] = {'old': old_price, 'new': new_price}
            record_price(market.price_history, good_id, new_price)

        shift_supply(market, rng)

    return price_changes


def shift_supply(market, rng):
    """Each good independently may move one supply tier up or down."""
    for good_id in GOODS:
        if not chance(rng, SUPPLY_SHIFT_CHANCE):
            continue
        current = SUPPLY_ORDER.index(market.supply[good_id])
        direction = -1 if chance(rng, 0.5) else 1
        new_index = max(0, min(len(SUPPLY_ORDER) - 1, current + direction))
        if new_index != current:
            logger.debug(
                f"Supply shift in {market.market_id}: {good_id} "
                f"{SUPPLY_ORDER[current]} -> {SUPPLY_ORDER[new_index]}"
            )
        market.supply[good_id] = SUPPLY_ORDER[new_index]


def shift_good_price(state: GameState, good_id: str, factor: float):
    """Scale one good's price in every market (event shocks)."""
    for market in state.markets.values():
        market.prices[good_id] = round_half_up(market.prices[good_id] * factor)
