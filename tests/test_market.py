"""
Tests for the price & supply simulator
"""

import random
import pytest
from market import anchor_price, price_bounds, record_price, shift_good_price, shift_supply, update_prices
from world import GOODS, SUPPLY_ORDER
from world.config import PRICE_HISTORY_LENGTH


class TestBounds:

    def test_price_bounds(self):
        assert price_bounds('compute', 'us-west') == (315, 2340)
        assert price_bounds('h100', 'china-east') == (26250, 78000)

    def test_anchor_tracks_supply(self):
        assert anchor_price('compute', 'us-west', 'normal') == pytest.approx(1125)
        assert anchor_price('compute', 'us-west', 'shortage') == pytest.approx(1350)
        assert anchor_price('compute', 'us-west', 'surplus') == pytest.approx(956.25)


class TestUpdatePrices:

    def test_single_step_is_deterministic(self, state, quiet_rng):
        """+9.8% walk, then 90/10 blend with the 1125 anchor."""
        changes = update_prices(state, quiet_rng)

        assert changes['us-west']['compute'] == {'old': 1125, 'new': 1224}
        assert state.markets['us-west'].prices['compute'] == 1224
        assert state.markets['us-west'].price_history['compute'] == [1125, 1224]

    def test_prices_stay_in_bounds(self, state):
        rng = random.Random(7)

        for _ in range(200):
            update_prices(state, rng)

        for market_id, market in state.markets.items():
            for good_id, price in market.prices.items():
                low, high = price_bounds(good_id, market_id)
                assert low <= price <= high
                assert isinstance(price, int)

    def test_history_is_capped(self, state):
        rng = random.Random(3)

        for _ in range(20):
            update_prices(state, rng)

        for market in state.markets.values():
            for good_id, history in market.price_history.items():
                assert len(history) == PRICE_HISTORY_LENGTH
                assert history[-1] == market.prices[good_id]

    def test_record_price_evicts_oldest(self):
        history = {'compute': list(range(PRICE_HISTORY_LENGTH))}

        record_price(history, 'compute', 99)

        assert history['compute'][0] == 1
        assert history['compute'][-1] == 99
        assert len(history['compute']) == PRICE_HISTORY_LENGTH


class TestSupply:

    def test_shift_moves_one_tier(self, state, scripted):
        market = state.markets['us-west']

        shift_supply(market, scripted([0.0, 0.0]))

        assert market.supply['h100'] == 'surplus'
        assert all(market.supply[g] == 'normal' for g in GOODS if g != 'h100')

    def test_shift_clamps_at_ends(self, state, scripted):
        market = state.markets['us-west']
        market.supply['h100'] = SUPPLY_ORDER[-1]

        shift_supply(market, scripted([0.0, 0.9]))

        assert market.supply['h100'] == 'shortage'

    def test_no_shift_without_roll(self, state, quiet_rng):
        market = state.markets['us-west']

        shift_supply(market, quiet_rng)

        assert set(market.supply.values()) == {'normal'}


class TestShocks:

    def test_shift_good_price_hits_every_market(self, state):
        shift_good_price(state, 'compute', 1.3)

        assert state.markets['us-west'].prices['compute'] == 1463
        assert state.markets['singapore'].prices['compute'] == 1788
        assert state.markets['us-west'].prices['h100'] == 32500
