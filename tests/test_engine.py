"""
Tests for the action dispatcher - every rule is enforced, no input state is ever touched
"""

import json
import pytest
from engine import (
    Action, ActionKind, GameEngine, submit_action, available_actions, new_game,
    create_save_data, validate_save_data, save_game, load_game, list_saves, delete_save,
    SaveDataError, MAX_LOG_ENTRIES,
)
from state import GameState, GameEvent, create_initial_state
from world import EffectKind, EventCategory

US_WEST_COMPUTE_PRICE = 1125  # round(1250 x 0.9)


def milestone_ids(response):
    return [m.milestone_id for m in response.milestones_achieved]


class TestBuySell:
    """Trading at the current market."""

    def test_buy_compute_on_fresh_game(self, state, quiet_rng):
        """Fresh game, buy 1 compute at the starting us-west price."""
        result = submit_action(state, Action.buy('compute', 1), rng=quiet_rng)

        assert result.success is True
        assert result.state.player.inventory['compute'] == 1
        assert result.state.player.balance == 10000 - US_WEST_COMPUTE_PRICE
        assert result.state.milestones['first_trade'].achieved is True
        assert 'first_trade' in milestone_ids(result)

    def test_input_state_is_never_mutated(self, state, quiet_rng):
        """The caller's state stays exactly as it was."""
        before = state.to_dict()

        submit_action(state, Action.buy('compute', 2), rng=quiet_rng)
        submit_action(state, Action.wait(), rng=quiet_rng)
        submit_action(state, Action.borrow(5000), rng=quiet_rng)

        assert state.to_dict() == before

    def test_cannot_buy_more_than_can_afford(self, state):
        result = submit_action(state, Action.buy('h100', 100))

        assert result.success is False
        assert 'Insufficient funds' in result.error

    def test_cannot_buy_more_than_cargo_capacity(self, state):
        """Plenty of money, but only 10 slots."""
        state.player.balance = 10000000

        result = submit_action(state, Action.buy('compute', 20))

        assert result.success is False
        assert 'cargo space' in result.error
        assert result.state.player.inventory == {}
        assert result.state.player.balance == 10000000

    def test_cannot_buy_restricted_good(self, state):
        state.markets['us-west'].restricted.append('datasets')

        result = submit_action(state, Action.buy('datasets', 1))

        assert result.success is False
        assert 'restricted' in result.error

    def test_unknown_good_rejected(self, state):
        result = submit_action(state, Action.buy('tpu', 1))

        assert result.success is False
        assert 'Invalid good' in result.error

    @pytest.mark.parametrize('quantity', [0, -3])
    def test_non_positive_quantity_rejected(self, state, quantity):
        result = submit_action(state, Action.buy('compute', quantity))

        assert result.success is False
        assert result.state.player.balance == 10000

    def test_can_sell_goods_in_inventory(self, state, quiet_rng):
        state.player.inventory['compute'] = 5

        result = submit_action(state, Action.sell('compute', 3), rng=quiet_rng)

        assert result.success is True
        assert result.state.player.inventory['compute'] == 2
        assert result.state.player.balance == 10000 + 3 * US_WEST_COMPUTE_PRICE

    def test_cannot_sell_more_than_owned(self, state):
        state.player.inventory['compute'] = 2

        result = submit_action(state, Action.sell('compute', 5))

        assert result.success is False
        assert 'Insufficient inventory' in result.error

    def test_buy_then_sell_returns_balance(self, state, quiet_rng):
        """Zero round-trip cost at an unchanged price."""
        bought = submit_action(state, Action.buy('compute', 4), rng=quiet_rng)
        sold = submit_action(bought.state, Action.sell('compute', 4), rng=quiet_rng)

        assert sold.state.player.balance == 10000
        assert sold.state.player.inventory == {}
        assert sold.state.player.cost_basis == {}

    def test_buy_and_sell_do_not_advance_turn(self, state, quiet_rng):
        bought = submit_action(state, Action.buy('compute', 1), rng=quiet_rng)
        assert bought.state.turn == 1
        assert bought.turn_advanced is False

        sold = submit_action(bought.state, Action.sell('compute', 1), rng=quiet_rng)
        assert sold.state.turn == 1

    def test_discount_offer_is_consumed(self, state, quiet_rng):
        state.pending_events.append(GameEvent(
            event_id='bulk_buyer_1_0', category=EventCategory.OPPORTUNITY, title='Opportunity',
            description='', effect=EffectKind.DISCOUNT_BUY, good='compute', percent=20, turn=1,
        ))

        result = submit_action(state, Action.buy('compute', 1), rng=quiet_rng)

        assert result.state.player.balance == 10000 - 900
        assert result.state.pending_events == []
        assert 'Used discount: -20%!' in result.turn_summary

    def test_premium_offer_is_consumed(self, state, quiet_rng):
        state.player.inventory['compute'] = 1
        state.pending_events.append(GameEvent(
            event_id='bulk_buyer_1_0', category=EventCategory.OPPORTUNITY, title='Opportunity',
            description='', effect=EffectKind.PREMIUM_SELL, good='compute', percent=20, turn=1,
        ))

        result = submit_action(state, Action.sell('compute', 1), rng=quiet_rng)

        assert result.state.player.balance == 10000 + 1350
        assert result.state.pending_events == []

    def test_average_cost_survives_partial_sells(self, state, quiet_rng):
        from calculations import average_cost

        result = submit_action(state, Action.buy('compute', 6), rng=quiet_rng)
        for _ in range(3):
            result = submit_action(result.state, Action.sell('compute', 1), rng=quiet_rng)
            assert average_cost('compute', result.state.player) == US_WEST_COMPUTE_PRICE


class TestTravel:
    """Travel, risk confirmation and encounters."""

    def test_can_travel_to_different_market(self, state, quiet_rng):
        result = submit_action(state, Action.travel('singapore'), rng=quiet_rng)

        assert result.success is True
        assert result.state.player.location == 'singapore'
        assert result.state.turn == 2
        assert result.turn_advanced is True
        assert 'singapore' in result.state.stats.markets_visited
        assert len(result.state.stats.markets_visited) == 2

    def test_cannot_travel_to_current_location(self, state):
        result = submit_action(state, Action.travel('us-west'))

        assert result.success is False
        assert 'Already at' in result.error
        assert result.state.turn == 1

    def test_unknown_destination_rejected(self, state):
        result = submit_action(state, Action.travel('mars'))

        assert result.success is False
        assert 'Invalid destination' in result.error

    def test_restricted_cargo_needs_confirmation(self, state, quiet_rng):
        state.player.inventory['h100'] = 2

        result = submit_action(state, Action.travel('china-east'), rng=quiet_rng)

        assert result.success is False
        assert result.error == 'CONFIRM_RISK'
        assert result.destination == 'china-east'
        assert result.at_risk_goods[0]['good'] == 'h100'
        assert result.at_risk_goods[0]['seizure_risk'] == 30
        assert result.state.player.location == 'us-west'
        assert result.state.turn == 1

    def test_confirmed_travel_proceeds(self, state, quiet_rng):
        state.player.inventory['h100'] = 2

        result = submit_action(state, Action.travel('china-east', confirmed=True), rng=quiet_rng)

        assert result.success is True
        assert result.state.player.location == 'china-east'
        assert result.state.player.inventory['h100'] == 2
        assert result.seizures == []

    def test_encounter_pauses_journey(self, state, scripted):
        """A shady deal fires on the first draw; the trip waits on a decision."""
        result = submit_action(state, Action.travel('singapore'), rng=scripted([0.0]))

        assert result.success is True
        assert result.choice_event is not None
        assert result.choice_event.choice_type.value == 'shady_deal'
        assert result.turn_advanced is False
        assert result.state.turn == 1
        assert result.state.player.location == 'us-west'
        assert result.state.pending_destination == 'singapore'

    def test_pending_choice_blocks_other_actions(self, state, scripted):
        paused = submit_action(state, Action.travel('singapore'), rng=scripted([0.0]))

        result = submit_action(paused.state, Action.wait())

        assert result.success is False
        assert result.error == 'You must resolve the current choice first.'
        assert result.choice_event is not None

    def test_resolving_choice_completes_travel(self, state, scripted, quiet_rng):
        paused = submit_action(state, Action.travel('singapore'), rng=scripted([0.0]))

        result = submit_action(paused.state, Action.resolve_choice('decline'), rng=quiet_rng)

        assert result.success is True
        assert result.choice_result.message == 'You walked away from the deal.'
        assert result.state.pending_choice is None
        assert result.state.player.location == 'singapore'
        assert result.state.turn == 2
        assert result.turn_advanced is True

    def test_unoffered_choice_rejected(self, state, scripted):
        paused = submit_action(state, Action.travel('singapore'), rng=scripted([0.0]))

        result = submit_action(paused.state, Action.resolve_choice('gamble'))

        assert result.success is False
        assert result.error == 'Invalid choice: gamble'
        assert result.state.pending_choice is not None

    def test_resolve_without_pending_choice(self, state):
        result = submit_action(state, Action.resolve_choice('decline'))

        assert result.success is False
        assert result.error == 'No pending choice to resolve'

    def test_intel_bought_on_arrival_pays_off_next_turn(self, state, scripted, quiet_rng):
        """Shady deal and gambling miss, intel fires; an accurate 1-turn rising tip is bought."""
        state.player.balance = 100000
        paused = submit_action(state, Action.travel('singapore'), rng=scripted([0.99, 0.99, 0.0]))
        assert paused.choice_event.choice_type.value == 'intel'

        result = submit_action(paused.state, Action.resolve_choice('buy'), rng=scripted([0.0, 0.0, 0.0, 0.0]))

        assert result.state.turn == 2
        assert [e for e in result.events if e.category == EventCategory.INTEL] == []
        tips = [e for e in result.state.pending_events if e.effect == EffectKind.INTEL_TIP]
        assert len(tips) == 1
        assert tips[0].turns_remaining == 1

        result = submit_action(result.state, Action.wait(), rng=quiet_rng)

        assert [e.title for e in result.events if e.category == EventCategory.INTEL] == ['Intel Pays Off']
        assert result.state.pending_events == []


class TestTurnAdvance:
    """Wait and the world simulation that follows a turn-advancing action."""

    def test_wait_advances_turn(self, state, quiet_rng):
        result = submit_action(state, Action.wait(), rng=quiet_rng)

        assert result.success is True
        assert result.state.turn == 2
        assert result.turn_advanced is True
        assert 'Net worth: $10,000' in result.turn_summary

    def test_wait_causes_price_changes(self, state, quiet_rng):
        result = submit_action(state, Action.wait(), rng=quiet_rng)

        assert set(result.price_changes) == {'us-west', 'eu-central', 'china-east', 'singapore'}
        change = result.price_changes['us-west']['compute']
        assert change['old'] == US_WEST_COMPUTE_PRICE
        assert change['new'] == result.state.markets['us-west'].prices['compute']

    def test_stale_offer_expires(self, state, quiet_rng):
        state.pending_events.append(GameEvent(
            event_id='bulk_buyer_1_0', category=EventCategory.OPPORTUNITY, title='Opportunity',
            description='', effect=EffectKind.DISCOUNT_BUY, good='compute', percent=20, turn=1,
        ))

        result = submit_action(state, Action.wait(), rng=quiet_rng)
        result = submit_action(result.state, Action.wait(), rng=quiet_rng)
        assert len(result.state.pending_events) == 1

        result = submit_action(result.state, Action.wait(), rng=quiet_rng)
        assert result.state.pending_events == []


class TestDebt:
    """Borrowing, repayment and interest."""

    def test_can_borrow_money(self, state):
        result = submit_action(state, Action.borrow(5000))

        assert result.success is True
        assert result.state.player.balance == 15000
        assert result.state.player.debt == 5000
        assert result.state.stats.had_debt is True
        assert result.state.turn == 1

    def test_borrow_limited_to_twice_net_worth(self, state):
        result = submit_action(state, Action.borrow(20001))

        assert result.success is False
        assert 'Can only borrow up to $20,000' in result.error

    def test_debt_accrues_interest_on_turn_advance(self, state, quiet_rng):
        """debt / net worth = 1.0 puts the loan in the 12% tier."""
        borrowed = submit_action(state, Action.borrow(10000), rng=quiet_rng)

        result = submit_action(borrowed.state, Action.wait(), rng=quiet_rng)

        assert result.state.player.debt == 11200
        assert result.state.player.debt_interest_rate == 0.12
        assert 'Debt interest: +$1,200.' in result.turn_summary

    def test_can_pay_debt(self, state):
        state.player.debt = 5000

        result = submit_action(state, Action.pay_debt(3000))

        assert result.success is True
        assert result.state.player.debt == 2000
        assert result.state.player.balance == 7000

    def test_cannot_pay_more_than_balance(self, state):
        state.player.debt = 20000

        result = submit_action(state, Action.pay_debt(15000))

        assert result.success is False
        assert 'Insufficient funds' in result.error

    def test_cannot_pay_more_than_owed(self, state):
        state.player.debt = 1000

        result = submit_action(state, Action.pay_debt(2000))

        assert result.success is False
        assert 'Debt is only $1,000' in result.error

    def test_paying_off_debt_earns_milestone(self, state):
        borrowed = submit_action(state, Action.borrow(5000))

        result = submit_action(borrowed.state, Action.pay_debt(5000))

        assert 'debt_free' in milestone_ids(result)
        assert result.state.player.reputation == 60


class TestUpgrades:
    """Upgrade purchase rules."""

    def test_can_purchase_upgrade(self, state):
        state.player.balance = 100000

        result = submit_action(state, Action.upgrade('cargo_1'))

        assert result.success is True
        assert 'cargo_1' in result.state.purchased_upgrades
        assert result.state.player.inventory_capacity == 15
        assert result.state.player.balance == 50000
        assert result.state.turn == 1

    def test_cannot_buy_same_upgrade_twice(self, state):
        state.player.balance = 200000
        state.purchased_upgrades = ['cargo_1']

        result = submit_action(state, Action.upgrade('cargo_1'))

        assert result.success is False
        assert 'Already purchased' in result.error

    def test_cannot_buy_upgrade_without_prerequisite(self, state):
        state.player.balance = 200000

        result = submit_action(state, Action.upgrade('cargo_2'))

        assert result.success is False
        assert 'Requires' in result.error

    def test_milestone_gated_upgrade_is_locked(self, state):
        state.player.balance = 300000

        result = submit_action(state, Action.upgrade('insurance'))

        assert result.success is False
        assert 'Locked' in result.error

    def test_milestone_unlocks_gated_upgrade(self, state):
        state.player.balance = 300000
        state.milestones['series_a'].achieved = True

        result = submit_action(state, Action.upgrade('insurance'))

        assert result.success is True
        assert result.state.has_upgrade('insurance')

    def test_reputation_upgrade(self, state):
        state.player.balance = 200000

        result = submit_action(state, Action.upgrade('reputation_1'))

        assert result.state.player.reputation == 60


class TestMilestonesAndGameOver:
    """Milestones and terminal states through the dispatcher."""

    def test_wealth_milestone_triggers(self, state, quiet_rng):
        state.player.balance = 150000

        result = submit_action(state, Action.wait(), rng=quiet_rng)

        assert result.state.milestones['seed_round'].achieved is True
        assert 'cargo_1' in result.state.unlocked_upgrades

    def test_milestones_never_revert(self, state, quiet_rng):
        result = submit_action(state, Action.buy('compute', 1), rng=quiet_rng)
        for action in [Action.sell('compute', 1), Action.wait(), Action.borrow(1000)]:
            result = submit_action(result.state, action, rng=quiet_rng)
            assert result.state.milestones['first_trade'].achieved is True

    def test_bankruptcy(self, state, quiet_rng):
        """Debt vastly exceeds 3x net worth."""
        state.player.balance = 1000
        state.player.debt = 50000

        result = submit_action(state, Action.wait(), rng=quiet_rng)

        assert result.state.game_over is True
        assert result.state.game_over_reason == 'bankruptcy'
        assert 'Bankrupt' in result.turn_summary

    def test_destitution(self, state, quiet_rng):
        state.player.balance = 0

        result = submit_action(state, Action.wait(), rng=quiet_rng)

        assert result.state.game_over is True
        assert result.state.game_over_reason == 'destitution'

    def test_cannot_act_after_game_over(self, state):
        state.game_over = True
        state.game_over_reason = 'bankruptcy'

        result = submit_action(state, Action.wait())

        assert result.success is False
        assert 'Game is over' in result.error


class TestBoundary:
    """Dict actions, responses and available actions."""

    def test_dict_action_accepted(self, state, quiet_rng):
        result = submit_action(state, {'action': 'buy', 'good': 'compute', 'quantity': 1}, rng=quiet_rng)

        assert result.success is True
        assert result.state.player.inventory['compute'] == 1

    def test_unknown_action_kind(self, state):
        result = submit_action(state, {'kind': 'fly'})

        assert result.success is False
        assert result.error == 'Unknown action: fly'

    @pytest.mark.parametrize('action', [
        {'kind': 'buy', 'good': ['h100'], 'quantity': 1},
        {'kind': 'travel', 'destination': {'id': 'singapore'}},
        {'kind': 'upgrade', 'upgrade_id': 7},
        {'kind': 'resolveChoice', 'choice_id': ['buy']},
    ])
    def test_non_string_identifier_rejected(self, state, action):
        result = submit_action(state, action)

        assert result.success is False
        assert result.error.startswith('Invalid ')
        assert result.state.to_dict() == state.to_dict()

    @pytest.mark.parametrize('action', [
        Action.buy('compute', True),
        Action.borrow(True),
        Action.pay_debt(True),
    ])
    def test_bool_is_not_a_count(self, state, action):
        state.player.debt = 5000

        result = submit_action(state, action)

        assert result.success is False
        assert 'must be greater than 0' in result.error
        assert result.state.to_dict() == state.to_dict()

    def test_response_serializes_to_json(self, state, quiet_rng):
        result = submit_action(state, Action.wait(), rng=quiet_rng)

        payload = json.loads(json.dumps(result.to_dict()))

        assert payload['success'] is True
        assert payload['state']['turn'] == 2

    def test_available_actions_on_fresh_game(self, state):
        actions = available_actions(state)
        kinds = [a['kind'] for a in actions]

        buy_compute = next(a for a in actions if a['kind'] == 'buy' and a['good'] == 'compute')
        assert buy_compute['max_quantity'] == 8
        assert kinds.count('travel') == 3
        assert 'wait' in kinds
        assert 'sell' not in kinds
        assert 'payDebt' not in kinds
        upgrades = {a['upgrade_id'] for a in actions if a['kind'] == 'upgrade'}
        assert upgrades == {'cargo_1', 'reputation_1'}

    def test_no_actions_after_game_over(self, state):
        state.game_over = True

        assert available_actions(state) == []

    def test_only_choices_while_encounter_pending(self, state, scripted):
        paused = submit_action(state, Action.travel('singapore'), rng=scripted([0.0]))

        actions = available_actions(paused.state)

        assert {a['kind'] for a in actions} == {ActionKind.RESOLVE_CHOICE.value}
        assert {a['choice_id'] for a in actions} == {'accept', 'decline'}


class TestGameEngine:
    """Host-side session wrapper."""

    def test_new_game_initial_state(self):
        engine = new_game(seed=42)
        state = engine.get_state()

        assert state.player.balance == 10000
        assert state.player.location == 'us-west'
        assert state.turn == 1

    def test_take_turn_updates_state_and_log(self, quiet_rng):
        engine = GameEngine(rng=quiet_rng)

        engine.take_turn(Action.wait())

        assert engine.state.turn == 2
        assert engine.event_log[0]['type'] == 'action'
        assert engine.event_log[0]['text'].startswith('Waited.')

    def test_failed_turn_logs_error(self):
        engine = GameEngine()

        result = engine.take_turn(Action.travel('us-west'))

        assert result.success is False
        assert engine.state.turn == 1
        assert engine.event_log[0] == {'turn': 1, 'type': 'error', 'text': 'Already at this location'}

    def test_event_log_is_capped(self):
        engine = GameEngine()

        for _ in range(MAX_LOG_ENTRIES + 10):
            engine.take_turn(Action.travel('us-west'))

        assert len(engine.event_log) == MAX_LOG_ENTRIES

    def test_get_state_returns_copy(self):
        engine = GameEngine()

        engine.get_state().player.balance = 0

        assert engine.state.player.balance == 10000


class TestSaveLoad:
    """Save envelope and slot files."""

    def test_save_data_roundtrip(self, state, quiet_rng):
        played = submit_action(state, Action.buy('compute', 3), rng=quiet_rng).state
        played = submit_action(played, Action.wait(), rng=quiet_rng).state

        save_data = json.loads(json.dumps(create_save_data(played)))

        assert validate_save_data(save_data) == {'valid': True, 'errors': []}
        restored = GameState.from_dict(save_data['state'])
        assert restored.to_dict() == played.to_dict()

    def test_validate_reports_missing_fields(self):
        result = validate_save_data({'state': {'player': {'balance': True}}})

        assert result['valid'] is False
        assert 'Missing version field' in result['errors']
        assert 'Invalid or missing player.balance' in result['errors']
        assert 'Invalid or missing markets' in result['errors']

    def test_validate_rejects_non_object(self):
        assert validate_save_data('nope')['valid'] is False

    def test_save_and_load_roundtrip(self, tmp_path):
        """Game can be saved and loaded."""
        import engine
        original_save_dir = engine.SAVE_DIR
        engine.SAVE_DIR = tmp_path

        try:
            original = new_game(seed=42)
            original.take_turn(Action.buy('compute', 2))

            save_game(original.get_state(), slot=1)
            loaded = load_game(slot=1)

            assert loaded is not None
            assert loaded.player.balance == original.get_state().player.balance
            assert loaded.player.inventory == original.get_state().player.inventory
        finally:
            engine.SAVE_DIR = original_save_dir

    def test_engine_save_keeps_event_log(self, tmp_path):
        import engine
        original_save_dir = engine.SAVE_DIR
        engine.SAVE_DIR = tmp_path

        try:
            session = GameEngine()
            session.take_turn(Action.borrow(1000))
            session.save(slot=2)

            restored = GameEngine.load(slot=2)

            assert restored.state.player.debt == 1000
            assert restored.event_log == session.event_log
        finally:
            engine.SAVE_DIR = original_save_dir

    def test_load_nonexistent_returns_none(self, tmp_path):
        """Loading non-existent save returns None."""
        import engine
        original_save_dir = engine.SAVE_DIR
        engine.SAVE_DIR = tmp_path

        try:
            assert load_game(slot=999) is None
        finally:
            engine.SAVE_DIR = original_save_dir

    def test_corrupt_save_raises(self, tmp_path):
        import engine
        original_save_dir = engine.SAVE_DIR
        engine.SAVE_DIR = tmp_path

        try:
            (tmp_path / 'save_3.json').write_text('{not json')
            with pytest.raises(SaveDataError):
                load_game(slot=3)

            (tmp_path / 'save_4.json').write_text(json.dumps({'version': '1.0'}))
            with pytest.raises(SaveDataError) as exc_info:
                load_game(slot=4)
            assert 'Missing state field' in exc_info.value.errors
        finally:
            engine.SAVE_DIR = original_save_dir

    def test_list_and_delete_saves(self, tmp_path):
        import engine
        original_save_dir = engine.SAVE_DIR
        engine.SAVE_DIR = tmp_path

        try:
            state = create_initial_state()
            save_game(state, slot=3)
            save_game(state, slot=1)

            assert list_saves() == [1, 3]
            assert delete_save(3) is True
            assert delete_save(3) is False
            assert list_saves() == [1]
        finally:
            engine.SAVE_DIR = original_save_dir


class TestDeterminism:
    """Same seed, same game."""

    def test_same_seed_produces_same_market(self):
        engine1 = new_game(seed=42)
        engine2 = new_game(seed=42)

        for _ in range(5):
            engine1.take_turn(Action.wait())
            engine2.take_turn(Action.wait())

        assert engine1.get_state().to_dict() == engine2.get_state().to_dict()

    def test_different_seeds_produce_different_markets(self):
        engine1 = new_game(seed=42)
        engine2 = new_game(seed=999)

        for _ in range(10):
            engine1.take_turn(Action.wait())
            engine2.take_turn(Action.wait())

        assert engine1.get_state().markets != engine2.get_state().markets


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
