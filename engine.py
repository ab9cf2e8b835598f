"""
Compute Wars - Game Engine

Turn resolution for a single trader moving six commodities across four
markets. submit_action() is the only way state changes: it takes a state
and an action, works on a private snapshot, and returns a response with
the new state. The caller's state is never touched.

This module is the single entry point for:
- Action model and ActionResponse
- Validation and dispatch of the eight player actions
- Turn advance (interest, events, prices, oracle, game over)
- Available-action enumeration for the UI
- Save envelope and save slots
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Union
from enum import Enum
import json
import logging
import random
from pathlib import Path

from calculations import (
    at_risk_goods,
    debt_interest_rate,
    effective_buy_price,
    effective_sell_price,
    inventory_used,
    max_borrowable,
    net_worth,
)
from chance import default_rng
from encounters import Arrival, ChoiceResult, Seizure, arrive, resolve_choice, roll_travel_choice
from events import advance_pending_events, apply_events, prune_pending_events, roll_events, roll_oracle
from market import update_prices
from messages import format_money, render
from progression import check_game_over, check_milestones
from state import GameState, GameEvent, ChoiceEvent, MilestoneProgress, create_initial_state, round_half_up
from world import (
    GOODS,
    MARKETS,
    MILESTONES,
    UPGRADES,
    EventCategory,
    UpgradeEffectType,
    get_good,
    get_market,
    get_upgrade,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ACTIONS
# =============================================================================

class ActionKind(str, Enum):
    BUY = 'buy'
    SELL = 'sell'
    TRAVEL = 'travel'
    WAIT = 'wait'
    BORROW = 'borrow'
    PAY_DEBT = 'payDebt'
    UPGRADE = 'upgrade'
    RESOLVE_CHOICE = 'resolveChoice'


@dataclass
class Action:
    """
    One player command. Only the fields its kind needs are read:

    buy/sell: good, quantity        travel: destination, confirmed
    borrow/payDebt: amount          upgrade: upgrade_id
    resolveChoice: choice_id        wait: -
    """

    kind: ActionKind
    good: Optional[str] = None
    quantity: Optional[int] = None
    destination: Optional[str] = None
    confirmed: bool = False
    amount: Optional[int] = None
    upgrade_id: Optional[str] = None
    choice_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Action':
        """Build from a boundary dict: {'kind': 'buy', 'good': 'h100', 'quantity': 2}."""
        if not isinstance(data, dict):
            raise InvalidActionError(f"Unknown action: {data}")
        raw_kind = data.get('kind', data.get('action'))
        try:
            kind = ActionKind(raw_kind)
        except ValueError:
            raise InvalidActionError(f"Unknown action: {raw_kind}")
        return cls(
            kind=kind,
            good=data.get('good'),
            quantity=data.get('quantity'),
            destination=data.get('destination'),
            confirmed=bool(data.get('confirmed', False)),
            amount=data.get('amount'),
            upgrade_id=data.get('upgrade_id', data.get('upgradeId')),
            choice_id=data.get('choice_id', data.get('choiceId')),
        )

    # Convenience constructors
    @classmethod
    def buy(cls, good: str, quantity: int) -> 'Action':
        return cls(ActionKind.BUY, good=good, quantity=quantity)

    @classmethod
    def sell(cls, good: str, quantity: int) -> 'Action':
        return cls(ActionKind.SELL, good=good, quantity=quantity)

    @classmethod
    def travel(cls, destination: str, confirmed: bool = False) -> 'Action':
        return cls(ActionKind.TRAVEL, destination=destination, confirmed=confirmed)

    @classmethod
    def wait(cls) -> 'Action':
        return cls(ActionKind.WAIT)

    @classmethod
    def borrow(cls, amount: int) -> 'Action':
        return cls(ActionKind.BORROW, amount=amount)

    @classmethod
    def pay_debt(cls, amount: int) -> 'Action':
        return cls(ActionKind.PAY_DEBT, amount=amount)

    @classmethod
    def upgrade(cls, upgrade_id: str) -> 'Action':
        return cls(ActionKind.UPGRADE, upgrade_id=upgrade_id)

    @classmethod
    def resolve_choice(cls, choice_id: str) -> 'Action':
        return cls(ActionKind.RESOLVE_CHOICE, choice_id=choice_id)


TURN_ADVANCING_ACTIONS = (ActionKind.TRAVEL, ActionKind.WAIT)


@dataclass
class ActionResponse:
    """Everything the boundary needs to render the outcome of one action."""

    state: GameState
    success: bool = False
    error: Optional[str] = None
    events: List[GameEvent] = field(default_factory=list)
    price_changes: Dict[str, Dict[str, Dict[str, int]]] = field(default_factory=dict)
    milestones_achieved: List[MilestoneProgress] = field(default_factory=list)
    net_worth: int = 0
    turn_summary: str = ''
    turn_advanced: bool = False
    choice_event: Optional[ChoiceEvent] = None
    choice_result: Optional[ChoiceResult] = None
    seizures: List[Seizure] = field(default_factory=list)
    oracle_message: Optional[Dict[str, Any]] = None
    at_risk_goods: List[Dict[str, Any]] = field(default_factory=list)
    destination: Optional[str] = None

    def note(self, text: str):
        """Append a sentence to the running turn summary."""
        self.turn_summary = f"{self.turn_summary} {text}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'error': self.error,
            'state': self.state.to_dict(),
            'events': [e.to_dict() for e in self.events],
            'price_changes': self.price_changes,
            'milestones_achieved': [m.to_dict() for m in self.milestones_achieved],
            'net_worth': self.net_worth,
            'turn_summary': self.turn_summary,
            'turn_advanced': self.turn_advanced,
            'choice_event': self.choice_event.to_dict() if self.choice_event else None,
            'choice_result': self.choice_result.to_dict() if self.choice_result else None,
            'seizures': [s.to_dict() for s in self.seizures],
            'oracle_message': self.oracle_message,
            'at_risk_goods': self.at_risk_goods,
            'destination': self.destination,
        }


# =============================================================================
# TURN RESOLVER
# One instance per submit_action() call; owns a private snapshot.
# =============================================================================

class TurnResolver:
    """
    Validates and executes one action against a snapshot.

    Handlers validate everything before they mutate anything, so a rejected
    action leaves the snapshot exactly as it was handed in.
    """

    def __init__(self, state: GameState, rng=None):
        self.state = state
        self.rng = default_rng(rng)
        self.response = ActionResponse(state=state)
        self._advance_turn = False
        self._handlers = {
            ActionKind.BUY: self._buy,
            ActionKind.SELL: self._sell,
            ActionKind.TRAVEL: self._travel,
            ActionKind.WAIT: self._wait,
            ActionKind.BORROW: self._borrow,
            ActionKind.PAY_DEBT: self._pay_debt,
            ActionKind.UPGRADE: self._upgrade,
            ActionKind.RESOLVE_CHOICE: self._resolve_choice,
        }

    # -------------------------------------------------------------------------
    # DISPATCH
    # -------------------------------------------------------------------------

    def resolve(self, action: Union[Action, Dict[str, Any]]) -> ActionResponse:
        response = self.response
        state = self.state

        try:
            if not isinstance(action, Action):
                action = Action.from_dict(action)
            _check_identifiers(action)
            if state.game_over:
                raise GameOverError('Game is over. Start a new game.')
            if state.pending_choice and action.kind != ActionKind.RESOLVE_CHOICE:
                raise ChoicePendingError('You must resolve the current choice first.')

            self._handlers[action.kind](action)

        except RiskConfirmationRequired as e:
            response.error = 'CONFIRM_RISK'
            response.at_risk_goods = e.at_risk_goods
            response.destination = e.destination
        except ActionError as e:
            logger.debug(f"Action rejected: {e}")
            response.error = str(e)
            response.choice_event = state.pending_choice
        else:
            response.success = True
            response.milestones_achieved = check_milestones(state)
            if self._advance_turn:
                self._advance()
            state._clamp_all_values()

        response.net_worth = net_worth(state)
        response.turn_advanced = self._advance_turn and response.success
        if response.turn_advanced:
            response.note(render('finance/net_worth', amount=response.net_worth))
        return response

    # -------------------------------------------------------------------------
    # TRADING
    # -------------------------------------------------------------------------

    def _validate_trade(self, action: Action):
        if get_good(action.good) is None:
            raise InvalidIdentifierError(f"Invalid good: {action.good}")
        if not _is_count(action.quantity):
            raise InvalidAmountError('Quantity must be greater than 0')
        if action.good in self.state.current_market().restricted:
            raise IllegalTransitionError(f"{GOODS[action.good].name} is restricted in this market")

    def _buy(self, action: Action):
        self._validate_trade(action)
        state, player = self.state, self.state.player
        good_id, quantity = action.good, action.quantity

        quote = effective_buy_price(state, good_id)
        total_cost = quote.price * quantity
        if total_cost > player.balance:
            raise InsufficientResourceError(
                f"Insufficient funds. Need {format_money(total_cost)}, have {format_money(player.balance)}"
            )
        used = inventory_used(player.inventory)
        if used + quantity > player.inventory_capacity:
            raise InsufficientResourceError(
                f"Insufficient cargo space. Need {quantity} slots, have {player.inventory_capacity - used}"
            )

        if quote.offer:
            state.pending_events.remove(quote.offer)
            self.response.note(render('trade/discount_used', percent=quote.percent))

        player.balance -= total_cost
        player.add_goods(good_id, quantity, total_cost)
        state.stats.total_trades += 1
        state.stats.goods_traded += quantity
        self.response.note(render('trade/bought', quantity=quantity, good=GOODS[good_id].name, total=total_cost))

    def _sell(self, action: Action):
        self._validate_trade(action)
        state, player = self.state, self.state.player
        good_id, quantity = action.good, action.quantity

        owned = player.inventory.get(good_id, 0)
        if quantity > owned:
            raise InsufficientResourceError(f"Insufficient inventory. Have {owned}, trying to sell {quantity}")

        quote = effective_sell_price(state, good_id)
        if quote.offer:
            state.pending_events.remove(quote.offer)
            self.response.note(render('trade/premium_used', percent=quote.percent))

        revenue = quote.price * quantity
        player.balance += revenue
        player.remove_goods(good_id, quantity)
        state.stats.total_trades += 1
        state.stats.goods_traded += quantity
        self.response.note(render('trade/sold', quantity=quantity, good=GOODS[good_id].name, total=revenue))

    # -------------------------------------------------------------------------
    # TRAVEL
    # -------------------------------------------------------------------------

    def _travel(self, action: Action):
        state = self.state
        destination = action.destination

        if get_market(destination) is None:
            raise InvalidIdentifierError(f"Invalid destination: {destination}")
        if destination == state.player.location:
            raise IllegalTransitionError('Already at this location')

        at_risk = at_risk_goods(state, destination)
        if at_risk and not action.confirmed:
            raise RiskConfirmationRequired(at_risk, destination)

        choice = roll_travel_choice(state, destination, self.rng)
        if choice:
            # The journey waits on the player's decision
            state.pending_choice = choice
            state.pending_destination = destination
            self.response.choice_event = choice
            self.response.note(render('travel/encounter'))
            return

        self._record_arrival(arrive(state, destination, self.rng))
        self.response.note(render('travel/departed', market=MARKETS[destination].name))
        self._advance_turn = True

    def _resolve_choice(self, action: Action):
        state = self.state
        choice = state.pending_choice

        if not choice:
            raise IllegalTransitionError('No pending choice to resolve')
        if action.choice_id not in choice.choice_ids():
            raise InvalidIdentifierError(f"Invalid choice: {action.choice_id}")

        result = resolve_choice(state, action.choice_id, self.rng)
        self.response.choice_result = result
        self.response.note(result.message)

        if state.pending_destination:
            destination = state.pending_destination
            state.pending_destination = None
            self._record_arrival(arrive(state, destination, self.rng))
            self.response.note(render('travel/arrived', market=MARKETS[destination].name))
            self._advance_turn = True

    def _record_arrival(self, arrival: Arrival):
        for seizure in arrival.seizures:
            if seizure.insurance_saved:
                self.response.note(render('customs/insured', good=seizure.good_name))
            else:
                self.response.note(render('customs/seized', quantity=seizure.quantity, good=seizure.good_name))
        self.response.seizures.extend(arrival.seizures)
        self.response.events.extend(arrival.events)

    def _wait(self, action: Action):
        self.response.note(render('travel/waited'))
        self._advance_turn = True

    # -------------------------------------------------------------------------
    # FINANCE
    # -------------------------------------------------------------------------

    def _borrow(self, action: Action):
        amount = action.amount
        if not _is_count(amount):
            raise InvalidAmountError('Amount must be greater than 0')
        limit = max_borrowable(self.state)
        if amount > limit:
            raise InsufficientResourceError(f"Can only borrow up to {format_money(limit)}")

        self.state.player.balance += amount
        self.state.player.debt += amount
        self.state.stats.had_debt = True
        self.response.note(render('finance/borrowed', amount=amount))

    def _pay_debt(self, action: Action):
        player = self.state.player
        amount = action.amount
        if not _is_count(amount):
            raise InvalidAmountError('Amount must be greater than 0')
        if amount > player.balance:
            raise InsufficientResourceError(f"Insufficient funds. Have {format_money(player.balance)}")
        if amount > player.debt:
            raise InsufficientResourceError(f"Debt is only {format_money(player.debt)}")

        player.balance -= amount
        player.debt -= amount
        self.response.note(render('finance/paid', amount=amount))

    def _upgrade(self, action: Action):
        state = self.state
        upgrade_id = action.upgrade_id
        upgrade = get_upgrade(upgrade_id)

        if upgrade is None:
            raise InvalidIdentifierError(f"Invalid upgrade: {upgrade_id}")
        if state.has_upgrade(upgrade_id):
            raise IllegalTransitionError('Already purchased this upgrade')
        if upgrade.prerequisite and not state.has_upgrade(upgrade.prerequisite):
            raise IllegalTransitionError(f"Requires {UPGRADES[upgrade.prerequisite].name} first")
        if not upgrade_unlocked(state, upgrade_id):
            raise IllegalTransitionError(
                f"Locked. Requires milestone: {MILESTONES[upgrade.unlocked_by_milestone].name}"
            )
        if upgrade.cost > state.player.balance:
            raise InsufficientResourceError(f"Insufficient funds. Need {format_money(upgrade.cost)}")

        state.player.balance -= upgrade.cost
        state.purchased_upgrades.append(upgrade_id)
        if upgrade.effect_type == UpgradeEffectType.INVENTORY:
            state.player.inventory_capacity += int(upgrade.effect_value)
        elif upgrade.effect_type == UpgradeEffectType.REPUTATION:
            state.player.reputation += int(upgrade.effect_value)
        self.response.note(render('upgrade/purchased', upgrade=upgrade.name))

    # -------------------------------------------------------------------------
    # TURN ADVANCE
    # -------------------------------------------------------------------------

    def _advance(self):
        """
        World simulation for a turn-advancing action.

        1. Accrue debt interest
        2. Roll and apply random events
        3. Mature intel tips
        4. Update prices and supply
        5. Roll for the oracle
        6. Check game over
        7. Advance turn, expire stale offers
        """
        state, response, rng = self.state, self.response, self.rng

        # 1. Interest
        if state.player.debt > 0:
            rate = debt_interest_rate(state)
            interest = round_half_up(state.player.debt * rate)
            state.player.debt += interest
            state.player.debt_interest_rate = rate
            if interest > 0:
                response.note(render('finance/interest', amount=interest))

        # 2. Events
        events = roll_events(state, rng)
        apply_events(state, events)
        response.events.extend(events)

        # 3. Intel
        response.events.extend(advance_pending_events(state))

        # 4. Prices
        response.price_changes = update_prices(state, rng)

        # 5. Oracle
        oracle = roll_oracle(state, rng)
        if oracle:
            response.oracle_message = oracle
            state.oracle_prediction = oracle

        # 6. Game over
        if check_game_over(state):
            response.note(render(
                f"game_over/{state.game_over_reason}",
                debt=state.player.debt, net_worth=net_worth(state),
            ))

        # 7. Turn
        state.turn += 1
        prune_pending_events(state)


# =============================================================================
# PUBLIC API
# =============================================================================

def submit_action(
    state: GameState,
    action: Union[Action, Dict[str, Any]],
    rng=None,
) -> ActionResponse:
    """
    Resolve one action.

    Args:
        state: Current state; never mutated
        action: Action or boundary dict
        rng: Random source with random(); defaults to the random module

    Returns:
        ActionResponse whose .state is the new state
    """
    return TurnResolver(state.snapshot(), rng).resolve(action)


def upgrade_unlocked(state: GameState, upgrade_id: str) -> bool:
    """Milestone gate: open once the milestone is achieved or it unlocked the upgrade."""
    gate = UPGRADES[upgrade_id].unlocked_by_milestone
    if not gate:
        return True
    return state.milestones[gate].achieved or upgrade_id in state.unlocked_upgrades


def available_actions(state: GameState) -> List[Dict[str, Any]]:
    """Legal next moves with their bounds, for UI affordances."""
    if state.game_over:
        return []
    if state.pending_choice:
        return [
            {'kind': ActionKind.RESOLVE_CHOICE.value, 'choice_id': c['id'], 'label': c['label']}
            for c in state.pending_choice.choices
        ]

    actions: List[Dict[str, Any]] = []
    player = state.player
    market = state.current_market()
    free_space = player.inventory_capacity - inventory_used(player.inventory)

    for good_id in GOODS:
        if good_id in market.restricted:
            continue
        max_quantity = min(max(0, player.balance) // effective_buy_price(state, good_id).price, free_space)
        if max_quantity > 0:
            actions.append({'kind': ActionKind.BUY.value, 'good': good_id, 'max_quantity': max_quantity})

    for good_id, quantity in player.inventory.items():
        if good_id not in market.restricted and quantity > 0:
            actions.append({'kind': ActionKind.SELL.value, 'good': good_id, 'max_quantity': quantity})

    for market_id in MARKETS:
        if market_id != player.location:
            actions.append({
                'kind': ActionKind.TRAVEL.value,
                'destination': market_id,
                'at_risk': bool(at_risk_goods(state, market_id)),
            })

    actions.append({'kind': ActionKind.WAIT.value})

    limit = max_borrowable(state)
    if limit > 0:
        actions.append({'kind': ActionKind.BORROW.value, 'max_amount': limit})

    if player.debt > 0 and player.balance > 0:
        actions.append({'kind': ActionKind.PAY_DEBT.value, 'max_amount': min(player.balance, player.debt)})

    for upgrade_id, upgrade in UPGRADES.items():
        if state.has_upgrade(upgrade_id):
            continue
        has_prerequisite = not upgrade.prerequisite or state.has_upgrade(upgrade.prerequisite)
        if has_prerequisite and upgrade_unlocked(state, upgrade_id):
            actions.append({
                'kind': ActionKind.UPGRADE.value,
                'upgrade_id': upgrade_id,
                'cost': upgrade.cost,
                'can_afford': player.balance >= upgrade.cost,
            })

    return actions


# =============================================================================
# HOST SESSION
# Application-side holder for the current state and its event log.
# =============================================================================

MAX_LOG_ENTRIES = 50

NEGATIVE_CATEGORIES = (EventCategory.CUSTOMS, EventCategory.HACK, EventCategory.AUDIT)
POSITIVE_CATEGORIES = (EventCategory.OPPORTUNITY, EventCategory.WINDFALL, EventCategory.INTEL)


class GameEngine:
    """
    Convenience wrapper for a host (CLI, web handler, tests) that keeps
    the latest state and a newest-first event log between calls.
    """

    def __init__(self, state: Optional[GameState] = None, rng=None,
                 event_log: Optional[List[Dict[str, Any]]] = None):
        self.state = state or create_initial_state()
        self.rng = rng
        self.event_log: List[Dict[str, Any]] = list(event_log or [])

    def take_turn(self, action: Union[Action, Dict[str, Any]]) -> ActionResponse:
        response = submit_action(self.state, action, rng=self.rng)

        if not response.success:
            self._log('error', response.error)
            return response

        self.state = response.state
        self._log('action', response.turn_summary)
        for event in response.events:
            if event.category in NEGATIVE_CATEGORIES:
                kind = 'negative'
            elif event.category in POSITIVE_CATEGORIES:
                kind = 'positive'
            else:
                kind = 'neutral'
            self._log(kind, f"{event.title}: {event.description}")
        return response

    def _log(self, kind: str, text: str):
        self.event_log.insert(0, {'turn': self.state.turn, 'type': kind, 'text': text})
        del self.event_log[MAX_LOG_ENTRIES:]

    def get_state(self) -> GameState:
        """Return a snapshot the caller may modify freely."""
        return self.state.snapshot()

    def is_game_over(self) -> bool:
        return self.state.game_over

    def get_game_over_reason(self) -> Optional[str]:
        return self.state.game_over_reason

    def get_valid_actions(self) -> List[Dict[str, Any]]:
        return available_actions(self.state)

    def get_turn_summary(self) -> Dict[str, Any]:
        """Headline numbers for a status bar."""
        player = self.state.player
        return {
            'turn': self.state.turn,
            'location': player.location,
            'balance': player.balance,
            'debt': player.debt,
            'net_worth': net_worth(self.state),
            'cargo': f"{inventory_used(player.inventory)}/{player.inventory_capacity}",
            'reputation': player.reputation,
        }

    def save(self, slot: int = 1) -> Path:
        return save_game(self.state, slot=slot, event_log=self.event_log)

    @classmethod
    def load(cls, slot: int = 1, rng=None) -> Optional['GameEngine']:
        save_data = read_save(slot)
        if save_data is None:
            return None
        return cls(GameState.from_dict(save_data['state']), rng=rng, event_log=save_data.get('event_log'))


# =============================================================================
# SAVE / LOAD
# =============================================================================

SAVE_VERSION = '1.0'
SAVE_DIR = Path("data/savegames")


def create_save_data(state: GameState, event_log: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Wrap a state snapshot in the versioned save envelope."""
    return {
        'version': SAVE_VERSION,
        'state': state.to_dict(),
        'event_log': list(event_log or []),
        'saved_at': datetime.now(timezone.utc).isoformat(),
    }


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_count(value) -> bool:
    """Positive whole number; bools are not counts."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


IDENTIFIER_FIELDS = ('good', 'destination', 'upgrade_id', 'choice_id')


def _check_identifiers(action: Action):
    """Table lookups key on strings; anything else is rejected up front."""
    for name in IDENTIFIER_FIELDS:
        value = getattr(action, name)
        if value is not None and not isinstance(value, str):
            raise InvalidIdentifierError(f"Invalid {name}: {value!r}")


def validate_save_data(save_data: Any) -> Dict[str, Any]:
    """
    Structural check of a save envelope: the handful of fields a game
    cannot start without. Not a schema of the full state.

    Returns:
        {'valid': bool, 'errors': [str, ...]}
    """
    if not isinstance(save_data, dict):
        return {'valid': False, 'errors': ['Save data must be an object']}

    errors = []
    if not save_data.get('version'):
        errors.append('Missing version field')

    state = save_data.get('state')
    if not state:
        errors.append('Missing state field')
    elif not isinstance(state, dict):
        errors.append('Invalid state field')
    else:
        player = state.get('player')
        if not isinstance(player, dict):
            errors.append('Missing player in state')
        else:
            if not _is_number(player.get('balance')):
                errors.append('Invalid or missing player.balance')
            if not isinstance(player.get('location'), str):
                errors.append('Invalid or missing player.location')
            if not isinstance(player.get('inventory'), dict):
                errors.append('Invalid or missing player.inventory')

        if not isinstance(state.get('markets'), dict):
            errors.append('Invalid or missing markets')
        if not _is_number(state.get('turn')):
            errors.append('Invalid or missing turn')

    return {'valid': not errors, 'errors': errors}


def ensure_save_dir():
    """Ensure save directory exists."""
    SAVE_DIR.mkdir(parents=True, exist_ok=True)


def save_game(state: GameState, slot: int = 1, event_log: Optional[List[Dict[str, Any]]] = None) -> Path:
    """Write the save envelope to a JSON slot file."""
    ensure_save_dir()
    save_path = SAVE_DIR / f"save_{slot}.json"

    with open(save_path, 'w') as f:
        json.dump(create_save_data(state, event_log), f, indent=2)

    logger.info(f"Game saved to {save_path} (turn {state.turn})")
    return save_path


def read_save(slot: int = 1) -> Optional[Dict[str, Any]]:
    """Read and validate a slot's envelope; None if the slot is empty."""
    save_path = SAVE_DIR / f"save_{slot}.json"

    if not save_path.exists():
        return None

    try:
        with open(save_path, 'r') as f:
            save_data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"Unreadable save {save_path}: {e}")
        raise SaveDataError(f"Failed to parse save file: {e}", [str(e)])

    validation = validate_save_data(save_data)
    if not validation['valid']:
        logger.warning(f"Invalid save {save_path}: {validation['errors']}")
        raise SaveDataError(f"Invalid save: {validation['errors'][0]}", validation['errors'])

    return save_data


def load_game(slot: int = 1) -> Optional[GameState]:
    """Deserialize GameState from a slot file."""
    save_data = read_save(slot)
    if save_data is None:
        return None
    return GameState.from_dict(save_data['state'])


def list_saves() -> List[int]:
    """List available save slots."""
    if not SAVE_DIR.exists():
        return []

    slots = []
    for f in SAVE_DIR.glob("save_*.json"):
        try:
            slot = int(f.stem.split('_')[1])
            slots.append(slot)
        except (IndexError, ValueError):
            continue

    return sorted(slots)


def delete_save(slot: int) -> bool:
    """Delete a save file."""
    save_path = SAVE_DIR / f"save_{slot}.json"
    if save_path.exists():
        save_path.unlink()
        return True
    return False


# =============================================================================
# EXCEPTIONS
# Raised inside the resolver, turned into error responses by submit_action.
# =============================================================================

class ActionError(Exception):
    """Base class for a rejected action."""
    pass


class InvalidActionError(ActionError):
    """Raised when the action kind is unknown."""
    pass


class InvalidIdentifierError(ActionError):
    """Unknown good, market, upgrade or choice id."""
    pass


class InvalidAmountError(ActionError):
    """Quantity or amount is not a positive integer."""
    pass


class InsufficientResourceError(ActionError):
    """Not enough funds, cargo space, inventory or borrowing headroom."""
    pass


class IllegalTransitionError(ActionError):
    """The action is not allowed from the current state."""
    pass


class GameOverError(IllegalTransitionError):
    """Raised when attempting to play after game over."""
    pass


class ChoicePendingError(IllegalTransitionError):
    """Raised when acting while an encounter awaits a decision."""
    pass


class RiskConfirmationRequired(ActionError):
    """Travel would carry restricted cargo; retry with confirmed=True."""

    def __init__(self, at_risk: List[Dict[str, Any]], destination: str):
        super().__init__('CONFIRM_RISK')
        self.at_risk_goods = at_risk
        self.destination = destination


class SaveDataError(Exception):
    """Raised when a save file cannot be parsed or fails validation."""

    def __init__(self, message: str, errors: List[str]):
        super().__init__(message)
        self.errors = errors


# =============================================================================
# NEW GAME FACTORY
# =============================================================================

def new_game(seed: Optional[int] = None) -> GameEngine:
    """Create a new session; a seed makes every roll reproducible."""
    rng = random.Random(seed) if seed is not None else None
    return GameEngine(state=create_initial_state(), rng=rng)


# =============================================================================
# MAIN ENTRY (for testing)
# =============================================================================

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    engine = new_game(seed=42)
    print("Initial state:", engine.get_turn_summary())

    script = [
        Action.buy('compute', 5),
        Action.travel('singapore'),
        Action.sell('compute', 5),
        Action.wait(),
        Action.travel('eu-central'),
    ]
    for action in script:
        result = engine.take_turn(action)
        if result.choice_event:
            print(f"\nEncounter: {result.choice_event.text} ({result.choice_event.risk_text})")
            result = engine.take_turn(Action.resolve_choice('decline'))
        print(f"\n{action.kind.value}: {result.turn_summary or result.error}")
        for event in result.events:
            print(f"  {event.title}: {event.description}")
    print("\nFinal state:", engine.get_turn_summary())
