"""
Compute Wars - Event Roller & Applier

Each turn-advancing action rolls every event category independently,
materializes the ones that fire into GameEvent records, then applies them
in roll order. Rolling and applying are separate passes: all rolls for a
turn see the same pre-event state.
"""

from typing import Dict, Any, List, Optional, Callable
import logging

from calculations import inventory_used, net_worth
from chance import chance, pick, roll_int
from market import shift_good_price
from messages import render_text
from state import GameState, GameEvent
from world import (
    CATEGORY_SHOCKS,
    EVENTS,
    GOODS,
    GPU_GOODS,
    MARKETS,
    EffectKind,
    EventCategory,
    EventDefinition,
    list_goods,
    list_markets,
)
from world.config import (
    REPUTATION_CENTER,
    REPUTATION_EVENT_MODIFIER,
    OPPORTUNITY_TTL,
    AUDIT_WEALTH_SCALE,
    AUDIT_WEALTH_CAP,
    PROTECTION_CHANCE,
)
from world.events import (
    INTEL_TIP_TEXT,
    INTEL_TIP_TITLE,
    ORACLE_BASE_COST,
    ORACLE_ICON,
    ORACLE_FREE_CHANCE,
    ORACLE_FREE_HINTS,
    ORACLE_NAME,
    ORACLE_PREDICTIONS,
    ORACLE_PROBABILITY,
    ORACLE_REPUTATION_ACCURACY,
)

logger = logging.getLogger(__name__)


def reputation_modifier(state: GameState) -> float:
    """Signed event-probability shift; positive for a well-regarded trader."""
    return (state.player.reputation - REPUTATION_CENTER) * REPUTATION_EVENT_MODIFIER


# =============================================================================
# ROLLING
# =============================================================================

def category_probability(
    state: GameState,
    definition: EventDefinition,
    rng,
    destination: Optional[str] = None,
) -> float:
    """
    Probability that a category fires this turn.

    Bad news gets rarer as reputation rises; opportunities and windfalls
    get more common. Protection upgrades get a coin flip to zero out the
    matching category entirely.
    """
    rep = reputation_modifier(state)
    category = definition.category

    if category == EventCategory.MARKET_SHIFT:
        return definition.probability - rep * 0.5
    if category == EventCategory.REGULATION:
        return definition.probability
    if category == EventCategory.CUSTOMS:
        if state.has_upgrade('insurance') and chance(rng, PROTECTION_CHANCE):
            return 0.0
        return MARKETS[destination].customs_risk - rep
    if category == EventCategory.HACK:
        if state.has_upgrade('security') and chance(rng, PROTECTION_CHANCE):
            return 0.0
        return definition.probability - rep * 0.5
    if category == EventCategory.AUDIT:
        wealth = min(AUDIT_WEALTH_CAP, net_worth(state) / AUDIT_WEALTH_SCALE)
        return definition.probability + wealth - rep * 0.5
    # Opportunity, windfall
    return definition.probability + rep


def roll_events(
    state: GameState,
    rng,
    traveling: bool = False,
    destination: Optional[str] = None,
) -> List[GameEvent]:
    """Roll every category once; customs only while traveling."""
    events: List[GameEvent] = []

    for event_id, definition in EVENTS.items():
        if definition.category == EventCategory.CUSTOMS and not (traveling and destination):
            continue

        probability = category_probability(state, definition, rng, destination)
        if not chance(rng, probability):
            continue

        event = _materialize(state, definition, rng, f"{event_id}_{state.turn}_{len(events)}")
        if event is not None:
            logger.debug(f"Event rolled: {event.event_id} ({event.effect.value}) - {event.description}")
            events.append(event)

    return events


def _materialize(state: GameState, definition: EventDefinition, rng, event_id: str) -> Optional[GameEvent]:
    """Pick a template and roll its concrete parameters."""
    category = definition.category
    template = pick(rng, definition.templates)
    params: Dict[str, Any] = {}
    fields: Dict[str, Any] = {}

    if category == EventCategory.MARKET_SHIFT:
        good_id = pick(rng, list_goods())
        fields = {'good': good_id, 'percent': roll_int(rng, 10, 20)}
        if template.effect == EffectKind.COMPUTE_VOLATILE:
            fields['good'] = 'compute'
            fields['direction'] = 'rise' if chance(rng, 0.5) else 'fall'

    elif category == EventCategory.REGULATION:
        good_id = template.good or pick(rng, list_goods())
        market_id = template.market
        if template.effect == EffectKind.RESTRICT and market_id is None:
            market_id = pick(rng, list_markets())
        fields = {'good': good_id, 'market': market_id}

    elif category == EventCategory.CUSTOMS:
        held = [(g, q) for g, q in state.player.inventory.items() if q > 0]
        if inventory_used(state.player.inventory) == 0 or not held:
            return None
        if template.effect == EffectKind.SEIZE:
            good_id, quantity = pick(rng, held)
            seized = max(1, int(quantity * (rng.random() * 0.3 + 0.1)))
            fields = {'good': good_id, 'quantity': seized}
        else:
            fields = {'amount': int(max(0, state.player.balance) * (rng.random() * 0.02 + 0.01))}

    elif category == EventCategory.HACK:
        fields = {'amount': int(max(0, state.player.balance) * (rng.random() * 0.15 + 0.05))}

    elif category == EventCategory.AUDIT:
        fields = {'amount': int(max(0, net_worth(state)) * (rng.random() * 0.05 + 0.02))}

    elif category == EventCategory.OPPORTUNITY:
        fields = {'good': pick(rng, list_goods()), 'percent': roll_int(rng, 20, 30)}

    elif category == EventCategory.WINDFALL:
        fields = {'amount': roll_int(rng, 10000, 30000)}

    good_id = fields.get('good')
    params.update({
        'good': GOODS[good_id].name if good_id else '',
        'percent': fields.get('percent', 0),
        'quantity': fields.get('quantity', 0),
        'amount': fields.get('amount', 0),
        'market': MARKETS[fields['market']].name if fields.get('market') else '',
    })

    return GameEvent(
        event_id=event_id,
        category=category,
        title=definition.title,
        description=render_text(template.text, params),
        effect=template.effect,
        turn=state.turn,
        **fields,
    )


# =============================================================================
# APPLYING
# =============================================================================

def _apply_drop(state: GameState, event: GameEvent):
    shift_good_price(state, event.good, 1 - event.percent / 100)


def _apply_rise(state: GameState, event: GameEvent):
    shift_good_price(state, event.good, 1 + event.percent / 100)


def _apply_rise_all(state: GameState, event: GameEvent):
    for good_id in GPU_GOODS:
        shift_good_price(state, good_id, 1 + event.percent / 100)


def _apply_category_shock(state: GameState, event: GameEvent):
    good_id, factor = CATEGORY_SHOCKS[event.effect]
    shift_good_price(state, good_id, factor)


def _apply_compute_volatile(state: GameState, event: GameEvent):
    sign = 1 if event.direction == 'rise' else -1
    shift_good_price(state, 'compute', 1 + sign * event.percent / 100)


def _apply_restrict(state: GameState, event: GameEvent):
    if event.market and event.good:
        restricted = state.markets[event.market].restricted
        if event.good not in restricted:
            restricted.append(event.good)


def _apply_unrestrict(state: GameState, event: GameEvent):
    """Lift the named good's ban; failing that, lift any standing ban."""
    for market in state.markets.values():
        if event.good in market.restricted:
            market.restricted.remove(event.good)
            return
    for market in state.markets.values():
        if market.restricted:
            market.restricted.pop()
            return


def _apply_seize(state: GameState, event: GameEvent):
    if event.good and event.quantity:
        state.player.remove_goods(event.good, event.quantity)


def _apply_money_loss(state: GameState, event: GameEvent):
    state.player.balance = max(0, state.player.balance - event.amount)


def _apply_money_gain(state: GameState, event: GameEvent):
    state.player.balance += event.amount


def _defer(state: GameState, event: GameEvent):
    """Offers wait in pending_events until a matching trade uses them."""
    state.pending_events.append(event)


EFFECT_HANDLERS: Dict[EffectKind, Callable[[GameState, GameEvent], None]] = {
    EffectKind.DROP: _apply_drop,
    EffectKind.RISE: _apply_rise,
    EffectKind.RISE_ALL: _apply_rise_all,
    EffectKind.COMPUTE_RISE: _apply_category_shock,
    EffectKind.COMPUTE_SPIKE: _apply_category_shock,
    EffectKind.COMPUTE_DROP: _apply_category_shock,
    EffectKind.TALENT_RISE: _apply_category_shock,
    EffectKind.DATASETS_DROP: _apply_category_shock,
    EffectKind.COMPUTE_VOLATILE: _apply_compute_volatile,
    EffectKind.RESTRICT: _apply_restrict,
    EffectKind.UNRESTRICT: _apply_unrestrict,
    EffectKind.SEIZE: _apply_seize,
    EffectKind.MONEY_LOSS: _apply_money_loss,
    EffectKind.FINE: _apply_money_loss,
    EffectKind.MONEY_GAIN: _apply_money_gain,
    EffectKind.PREMIUM_SELL: _defer,
    EffectKind.DISCOUNT_BUY: _defer,
    EffectKind.INTEL_TIP: _defer,
}


def apply_events(state: GameState, events: List[GameEvent]):
    """Apply materialized events in roll order."""
    for event in events:
        EFFECT_HANDLERS[event.effect](state, event)


# =============================================================================
# PENDING EVENTS
# =============================================================================

def advance_pending_events(state: GameState) -> List[GameEvent]:
    """
    Count down intel tips; matured tips move their good's price in every
    market.

    Returns:
        The tips that paid off this turn, as displayable events
    """
    matured: List[GameEvent] = []
    still_pending: List[GameEvent] = []

    for event in state.pending_events:
        # Tips bought this turn start counting on the next one
        if event.effect != EffectKind.INTEL_TIP or (event.turn or 0) >= state.turn:
            still_pending.append(event)
            continue

        event.turns_remaining = (event.turns_remaining or 0) - 1
        if event.turns_remaining > 0:
            still_pending.append(event)
            continue

        sign = 1 if event.direction == 'rise' else -1
        shift_good_price(state, event.good, 1 + sign * event.percent / 100)
        matured.append(GameEvent(
            event_id=f"{event.event_id}_matured",
            category=EventCategory.INTEL,
            title=INTEL_TIP_TITLE,
            description=render_text(
                INTEL_TIP_TEXT[event.direction],
                {'good': GOODS[event.good].name, 'percent': event.percent},
            ),
            effect=EffectKind.RISE if sign > 0 else EffectKind.DROP,
            good=event.good,
            percent=event.percent,
            turn=state.turn,
        ))

    state.pending_events = still_pending
    return matured


def prune_pending_events(state: GameState):
    """Drop discount/premium offers older than OPPORTUNITY_TTL turns."""
    state.pending_events = [
        event for event in state.pending_events
        if event.effect == EffectKind.INTEL_TIP
        or state.turn - (event.turn if event.turn is not None else state.turn) < OPPORTUNITY_TTL
    ]


# =============================================================================
# ORACLE
# =============================================================================

def roll_oracle(state: GameState, rng) -> Optional[Dict[str, Any]]:
    """Occasional flavor prediction; accuracy scales with reputation."""
    if not chance(rng, ORACLE_PROBABILITY):
        return None

    prediction = pick(rng, ORACLE_PREDICTIONS)
    good_id = pick(rng, list_goods())
    market_id = pick(rng, list_markets())
    accuracy = prediction.accuracy + (state.player.reputation - REPUTATION_CENTER) * ORACLE_REPUTATION_ACCURACY

    return {
        'oracle': ORACLE_NAME,
        'icon': ORACLE_ICON,
        'text': render_text(prediction.text, {'good': GOODS[good_id].name, 'market': MARKETS[market_id].name}),
        'type': prediction.kind,
        'good': good_id,
        'market': market_id,
        'accuracy': max(0.0, min(1.0, accuracy)),
        'cost': ORACLE_BASE_COST,
        'is_free': chance(rng, ORACLE_FREE_CHANCE),
        'hint': pick(rng, ORACLE_FREE_HINTS),
    }
