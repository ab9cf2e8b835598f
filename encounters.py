"""
Compute Wars - Travel Encounters & Customs

Two things can happen on the road:

1. An encounter (shady deal, casino, intel broker, smuggler) that stops the
   journey until the player picks an option. The travel itself, the customs
   check, and the turn advance all wait for resolve_choice().
2. Customs on arrival: each good the destination restricts is rolled for
   seizure independently.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import logging

from calculations import inventory_used
from chance import chance, pick, roll_int
from events import apply_events, roll_events
from messages import render, render_text
from state import GameState, GameEvent, ChoiceEvent, round_half_up
from world import (
    GOODS,
    MARKETS,
    TRAVEL_CHOICES,
    ChoiceType,
    EffectKind,
    EventCategory,
    TravelChoiceDefinition,
    list_goods,
)
from world.config import (
    REPUTATION_CENTER,
    REPUTATION_EVENT_MODIFIER,
    TRAVEL_CHOICE_REPUTATION_WEIGHT,
    SEIZURE_FLOOR,
    SEIZURE_REPUTATION_FACTOR,
    SEIZURE_MIN_FRACTION,
    SEIZURE_FRACTION_SPREAD,
    PROTECTION_CHANCE,
)
from world.events import INTEL_QUEUED_TEXT, INTEL_QUEUED_TITLE

logger = logging.getLogger(__name__)


@dataclass
class ChoiceResult:
    """What resolving an encounter did."""

    success: bool = True
    message: str = ''
    gained_goods: Optional[Dict[str, Any]] = None
    lost_money: int = 0
    gained_money: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'message': self.message,
            'gained_goods': self.gained_goods,
            'lost_money': self.lost_money,
            'gained_money': self.gained_money,
        }


@dataclass
class Seizure:
    """One customs outcome for one good."""

    good: str
    good_name: str
    quantity: int
    insurance_saved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'good': self.good,
            'good_name': self.good_name,
            'quantity': self.quantity,
            'insurance_saved': self.insurance_saved,
        }


@dataclass
class Arrival:
    """Everything that happened while completing a journey."""

    destination: str
    seizures: List[Seizure] = field(default_factory=list)
    events: List[GameEvent] = field(default_factory=list)


# =============================================================================
# ENCOUNTER ROLL
# =============================================================================

def carries_restricted_goods(state: GameState, destination: str) -> bool:
    restricted = MARKETS[destination].restricted_goods
    return any(qty > 0 and good_id in restricted for good_id, qty in state.player.inventory.items())


def roll_travel_choice(state: GameState, destination: str, rng) -> Optional[ChoiceEvent]:
    """Roll each encounter type in table order; the first hit wins."""
    rep = (state.player.reputation - REPUTATION_CENTER) * REPUTATION_EVENT_MODIFIER

    for definition in TRAVEL_CHOICES.values():
        if definition.requires_restricted_goods and not carries_restricted_goods(state, destination):
            continue
        if chance(rng, definition.probability + rep * TRAVEL_CHOICE_REPUTATION_WEIGHT):
            return generate_choice_event(definition, state, destination, rng)

    return None


def generate_choice_event(
    definition: TravelChoiceDefinition,
    state: GameState,
    destination: str,
    rng,
) -> ChoiceEvent:
    """Roll an encounter's parameters and render its prompt."""
    template = pick(rng, definition.templates)
    good_id = pick(rng, list_goods())
    reputation = state.player.reputation

    params = {
        'good': GOODS[good_id].name,
        'good_id': good_id,
        'quantity': roll_int(rng, 1, 5),
        'discount': roll_int(rng, 20, 30),              # 20-49%
        'risk': roll_int(rng, 15, 25),                  # 15-39%
        'amount': int(max(0, state.player.balance) * (0.1 + rng.random() * 0.3)),
        'entry_fee': roll_int(rng, 5000, 15000),
        'cost': roll_int(rng, 5000, 10000),
        'company': pick(rng, definition.companies) if definition.companies else 'NVIDIA',
        'accuracy': int(50 + reputation * 0.3),         # 50-80% by reputation
        'success': int(60 + reputation * 0.2),          # 60-80% by reputation
    }

    return ChoiceEvent(
        event_id=f"{definition.choice_type.value}_{state.turn}",
        choice_type=definition.choice_type,
        title=definition.title,
        text=render_text(template.text, params),
        risk_text=render_text(template.risk_text, params),
        choices=[{'id': c.choice_id, 'label': c.label, 'icon': c.icon} for c in template.choices],
        params=params,
        destination=destination,
    )


# =============================================================================
# ENCOUNTER RESOLUTION
# =============================================================================

def resolve_choice(state: GameState, choice_id: str, rng) -> ChoiceResult:
    """
    Apply the chosen option of the pending encounter and clear it.

    The caller validates that choice_id is one of the offered options.
    """
    choice = state.pending_choice
    params = choice.params
    handler = _CHOICE_HANDLERS[choice.choice_type]

    result = handler(state, choice, params, choice_id, rng)
    state.pending_choice = None
    logger.debug(f"Encounter {choice.event_id} resolved with '{choice_id}': {result.message}")
    return result


def _resolve_shady_deal(state: GameState, choice: ChoiceEvent, params, choice_id: str, rng) -> ChoiceResult:
    result = ChoiceResult()
    if choice_id != 'accept':
        result.message = render('choice/deal_declined')
        return result

    player = state.player
    good_id = params['good_id']
    unit_price = round_half_up(state.current_market().prices[good_id] * (1 - params['discount'] / 100))
    total = unit_price * params['quantity']

    if rng.random() * 100 > params['risk']:
        free_space = player.inventory_capacity - inventory_used(player.inventory)
        if player.balance < total:
            result.message = render('choice/deal_unaffordable')
        elif params['quantity'] > free_space:
            result.message = render('choice/deal_no_room')
        else:
            player.balance -= total
            player.add_goods(good_id, params['quantity'], total)
            result.message = render(
                'choice/deal_success',
                quantity=params['quantity'], good=params['good'], discount=params['discount'],
            )
            result.gained_goods = {'good': good_id, 'quantity': params['quantity']}
            result.lost_money = total
    else:
        # Counterfeit: the same money changes hands for nothing
        if player.balance >= total:
            player.balance -= total
            result.message = render('choice/deal_counterfeit', amount=total)
            result.lost_money = total
        else:
            result.message = render('choice/deal_lucky')
    return result


def _resolve_gambling(state: GameState, choice: ChoiceEvent, params, choice_id: str, rng) -> ChoiceResult:
    result = ChoiceResult()
    player = state.player

    if choice_id == 'gamble':
        stake = max(0, min(params['amount'], player.balance))
        if chance(rng, 0.5):
            player.balance += stake
            result.message = render('choice/gamble_won', amount=stake)
            result.gained_money = stake
        else:
            player.balance -= stake
            result.message = render('choice/gamble_lost', amount=stake)
            result.lost_money = stake

    elif choice_id == 'enter':
        fee = max(0, min(params['entry_fee'], player.balance))
        player.balance -= fee
        # 30% of entrants hit a 2x-5x prize; everyone else gets back at most half
        if chance(rng, 0.3):
            multiplier = 2 + rng.random() * 3
        else:
            multiplier = rng.random() * 0.5
        prize = round_half_up(fee * multiplier)
        player.balance += prize
        if prize > fee:
            result.message = render('choice/auction_won', prize=prize, profit=prize - fee)
            result.gained_money = prize - fee
        else:
            result.message = render('choice/auction_lost', prize=prize)
            result.lost_money = fee - prize

    else:
        result.message = render('choice/gamble_declined')
    return result


def _resolve_intel(state: GameState, choice: ChoiceEvent, params, choice_id: str, rng) -> ChoiceResult:
    result = ChoiceResult()
    if choice_id != 'buy':
        result.message = render('choice/intel_declined')
        return result

    cost = max(0, min(params['cost'], state.player.balance))
    state.player.balance -= cost
    result.lost_money = cost

    accurate = rng.random() * 100 < params['accuracy']
    direction = 'rise' if chance(rng, 0.5) else 'fall'

    if accurate:
        state.pending_events.append(GameEvent(
            event_id=f"intel_{params['good_id']}_{state.turn}",
            category=EventCategory.INTEL,
            title=INTEL_QUEUED_TITLE,
            description=render_text(INTEL_QUEUED_TEXT, {'good': params['good'], 'direction': direction}),
            effect=EffectKind.INTEL_TIP,
            good=params['good_id'],
            percent=roll_int(rng, 10, 16),
            turn=state.turn,
            direction=direction,
            turns_remaining=roll_int(rng, 1, 2),
        ))

    # Same words either way: a bluff is indistinguishable from a real tip
    result.message = render('choice/intel_bought', good=params['good'], direction=direction)
    return result


def _resolve_smuggler(state: GameState, choice: ChoiceEvent, params, choice_id: str, rng) -> ChoiceResult:
    result = ChoiceResult()
    if choice_id != 'use_smuggler':
        result.message = render('choice/smuggler_declined')
        return result

    cost = max(0, min(params['cost'], state.player.balance))
    state.player.balance -= cost
    result.lost_money = cost

    if rng.random() * 100 < params['success']:
        state.smuggled_this_trip = True
        result.message = render('choice/smuggler_success')
        return result

    # Caught: every restricted unit goes, no partial roll
    seized = []
    restricted = MARKETS[choice.destination].restricted_goods
    for good_id in [g for g in state.player.inventory if g in restricted]:
        quantity = state.player.remove_goods(good_id, state.player.inventory[good_id])
        seized.append(f"{quantity}x {GOODS[good_id].name}")
    result.message = render('choice/smuggler_caught', seized=', '.join(seized))
    return result


_CHOICE_HANDLERS = {
    ChoiceType.SHADY_DEAL: _resolve_shady_deal,
    ChoiceType.GAMBLING: _resolve_gambling,
    ChoiceType.INTEL: _resolve_intel,
    ChoiceType.SMUGGLER: _resolve_smuggler,
}


# =============================================================================
# CUSTOMS
# =============================================================================

def check_seizure(state: GameState, destination: str, rng) -> List[Seizure]:
    """
    Roll customs for every restricted good the player carries into
    destination. A successful smuggle skips the whole check once.
    """
    if state.smuggled_this_trip:
        state.smuggled_this_trip = False
        return []

    seizures: List[Seizure] = []
    reputation_bonus = (state.player.reputation - REPUTATION_CENTER) * SEIZURE_REPUTATION_FACTOR
    insured = state.has_upgrade('insurance')

    for good_id, restriction in MARKETS[destination].restricted_goods.items():
        quantity = state.player.inventory.get(good_id, 0)
        if quantity <= 0:
            continue

        seizure_chance = max(SEIZURE_FLOOR, restriction.seizure_risk - reputation_bonus)
        insurance_saves = insured and chance(rng, PROTECTION_CHANCE)

        if not chance(rng, seizure_chance):
            continue

        if insurance_saves:
            seizures.append(Seizure(good_id, GOODS[good_id].name, 0, insurance_saved=True))
            continue

        fraction = SEIZURE_MIN_FRACTION + rng.random() * SEIZURE_FRACTION_SPREAD
        seized = state.player.remove_goods(good_id, max(1, int(quantity * fraction)))
        logger.debug(f"Customs at {destination} seized {seized}x {good_id}")
        seizures.append(Seizure(good_id, GOODS[good_id].name, seized))

    return seizures


def arrive(state: GameState, destination: str, rng) -> Arrival:
    """Finish a journey: customs, road events, then the new location."""
    arrival = Arrival(destination=destination)
    arrival.seizures = check_seizure(state, destination, rng)

    arrival.events = roll_events(state, rng, traveling=True, destination=destination)
    apply_events(state, arrival.events)

    state.player.location = destination
    if destination not in state.stats.markets_visited:
        state.stats.markets_visited.append(destination)
    return arrival
