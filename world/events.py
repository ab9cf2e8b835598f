"""
Event, Travel Choice and Oracle Tables - Compute Wars

Templates for the random news that moves markets, the encounters that
interrupt a journey, and the oracle's cryptic predictions.

Template text is Jinja2 source rendered by the messages package; the
placeholders (good, percent, quantity, amount, ...) are filled with the
parameters rolled when an event materializes.
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum


class EventCategory(str, Enum):
    """Independent event categories rolled on every turn-advancing action."""
    MARKET_SHIFT = 'market_shift'
    REGULATION = 'regulation'
    CUSTOMS = 'customs'
    HACK = 'hack'
    AUDIT = 'audit'
    OPPORTUNITY = 'opportunity'
    WINDFALL = 'windfall'
    INTEL = 'intel'


class EffectKind(str, Enum):
    """Closed set of state effects an event can carry."""
    DROP = 'drop'
    RISE = 'rise'
    RISE_ALL = 'rise_all'
    COMPUTE_RISE = 'compute_rise'
    COMPUTE_SPIKE = 'compute_spike'
    COMPUTE_DROP = 'compute_drop'
    COMPUTE_VOLATILE = 'compute_volatile'
    TALENT_RISE = 'talent_rise'
    DATASETS_DROP = 'datasets_drop'
    RESTRICT = 'restrict'
    UNRESTRICT = 'unrestrict'
    SEIZE = 'seize'
    MONEY_LOSS = 'money_loss'
    FINE = 'fine'
    MONEY_GAIN = 'money_gain'
    PREMIUM_SELL = 'premium_sell'
    DISCOUNT_BUY = 'discount_buy'
    INTEL_TIP = 'intel_tip'


# Fixed-percentage category shocks: effect -> (good, price factor)
CATEGORY_SHOCKS: Dict[EffectKind, Tuple[str, float]] = {
    EffectKind.COMPUTE_RISE: ('compute', 1.3),
    EffectKind.COMPUTE_SPIKE: ('compute', 1.3),
    EffectKind.COMPUTE_DROP: ('compute', 0.75),
    EffectKind.TALENT_RISE: ('talent', 1.25),
    EffectKind.DATASETS_DROP: ('datasets', 0.7),
}


@dataclass(frozen=True)
class EventTemplate:
    text: str
    effect: EffectKind
    market: Optional[str] = None
    good: Optional[str] = None


@dataclass(frozen=True)
class EventDefinition:
    event_id: str
    category: EventCategory
    title: str
    probability: float
    templates: Tuple[EventTemplate, ...]


# =============================================================================
# RANDOM EVENTS
# =============================================================================

EVENTS: Dict[str, EventDefinition] = {
    'nvidia_announcement': EventDefinition(
        event_id='nvidia_announcement',
        category=EventCategory.MARKET_SHIFT,
        title='NVIDIA Announcement',
        probability=0.08,
        templates=(
            EventTemplate('NVIDIA announces next-gen architecture. {{ good }} prices dropping {{ percent }}% globally.',
                          EffectKind.DROP),
            EventTemplate('NVIDIA reports supply shortage. {{ good }} prices rising {{ percent }}% globally.',
                          EffectKind.RISE),
            EventTemplate('NVIDIA beats earnings expectations. All GPU prices up {{ percent }}%.',
                          EffectKind.RISE_ALL),
        ),
    ),
    'datacenter_news': EventDefinition(
        event_id='datacenter_news',
        category=EventCategory.MARKET_SHIFT,
        title='Datacenter News',
        probability=0.07,
        templates=(
            EventTemplate('Major cloud expansion announced. Compute demand surging.', EffectKind.COMPUTE_RISE),
            EventTemplate('Datacenter fire in Virginia. Cloud credits spiking.', EffectKind.COMPUTE_SPIKE),
            EventTemplate('Energy crisis affecting datacenters. Compute prices volatile.', EffectKind.COMPUTE_VOLATILE),
        ),
    ),
    'ai_breakthrough': EventDefinition(
        event_id='ai_breakthrough',
        category=EventCategory.MARKET_SHIFT,
        title='AI Breakthrough',
        probability=0.05,
        templates=(
            EventTemplate('Major AI lab publishes breakthrough paper. Talent demand soaring.', EffectKind.TALENT_RISE),
            EventTemplate('New training technique reduces compute needs. Compute prices falling.',
                          EffectKind.COMPUTE_DROP),
            EventTemplate('Open-source model released. Dataset prices dropping.', EffectKind.DATASETS_DROP),
        ),
    ),
    'export_ban': EventDefinition(
        event_id='export_ban',
        category=EventCategory.REGULATION,
        title='Export Restrictions',
        probability=0.05,
        templates=(
            EventTemplate('US tightens export controls. {{ good }} now restricted in China.',
                          EffectKind.RESTRICT, market='china-east'),
            EventTemplate('EU data regulations expanded. Datasets restricted in EU Central.',
                          EffectKind.RESTRICT, market='eu-central', good='datasets'),
            EventTemplate('Export ban lifted on {{ good }}. Trade freely again.', EffectKind.UNRESTRICT),
        ),
    ),
    'customs_seizure': EventDefinition(
        event_id='customs_seizure',
        category=EventCategory.CUSTOMS,
        title='Customs Seizure',
        probability=0.10,  # replaced by the destination's customs risk
        templates=(
            EventTemplate('Shipment intercepted at border. Lost {{ quantity }}x {{ good }}.', EffectKind.SEIZE),
            EventTemplate('Customs inspection delayed shipment. Paid {{ amount | currency }} in fees.',
                          EffectKind.FINE),
        ),
    ),
    'exchange_hack': EventDefinition(
        event_id='exchange_hack',
        category=EventCategory.HACK,
        title='Security Breach',
        probability=0.03,
        templates=(
            EventTemplate('Exchange hack detected. Lost {{ amount | currency }} from your account.',
                          EffectKind.MONEY_LOSS),
            EventTemplate('Phishing attack on your credentials. Security fees: {{ amount | currency }}.',
                          EffectKind.MONEY_LOSS),
        ),
    ),
    'tax_audit': EventDefinition(
        event_id='tax_audit',
        category=EventCategory.AUDIT,
        title='Tax Audit',
        probability=0.05,
        templates=(
            EventTemplate('Tax authorities investigating. Pay {{ amount | currency }} fine.', EffectKind.FINE),
            EventTemplate('Compliance review required. Operations slowed, {{ amount | currency }} in costs.',
                          EffectKind.FINE),
        ),
    ),
    'bulk_buyer': EventDefinition(
        event_id='bulk_buyer',
        category=EventCategory.OPPORTUNITY,
        title='Opportunity',
        probability=0.10,
        templates=(
            EventTemplate('Bulk buyer seeking {{ good }}. Sell now for +{{ percent }}% premium!',
                          EffectKind.PREMIUM_SELL),
            EventTemplate('Desperate seller offloading {{ good }}. Buy at -{{ percent }}% discount!',
                          EffectKind.DISCOUNT_BUY),
        ),
    ),
    'windfall': EventDefinition(
        event_id='windfall',
        category=EventCategory.WINDFALL,
        title='Windfall',
        probability=0.02,
        templates=(
            EventTemplate('Research grant received. +{{ amount | currency }}!', EffectKind.MONEY_GAIN),
            EventTemplate('Investment returns arrived. +{{ amount | currency }}!', EffectKind.MONEY_GAIN),
            EventTemplate('Old invoice finally paid. +{{ amount | currency }}!', EffectKind.MONEY_GAIN),
        ),
    ),
}

INTEL_QUEUED_TITLE = 'Intel Tip'
INTEL_QUEUED_TEXT = '{{ good }} prices will {{ direction }} soon.'
INTEL_TIP_TITLE = 'Intel Pays Off'
INTEL_TIP_TEXT = {
    'rise': 'Your source was right. {{ good }} prices jump {{ percent }}% across every market.',
    'fall': 'Your source was right. {{ good }} prices slide {{ percent }}% across every market.',
}


# =============================================================================
# TRAVEL CHOICES
# Interactive encounters that pause a journey until the player decides.
# =============================================================================

class ChoiceType(str, Enum):
    SHADY_DEAL = 'shady_deal'
    GAMBLING = 'gambling'
    INTEL = 'intel'
    SMUGGLER = 'smuggler'


@dataclass(frozen=True)
class ChoiceOption:
    choice_id: str
    label: str
    icon: str


@dataclass(frozen=True)
class ChoiceTemplate:
    text: str
    risk_text: str
    choices: Tuple[ChoiceOption, ...]


@dataclass(frozen=True)
class TravelChoiceDefinition:
    choice_type: ChoiceType
    title: str
    probability: float
    templates: Tuple[ChoiceTemplate, ...]
    companies: Tuple[str, ...] = field(default_factory=tuple)
    requires_restricted_goods: bool = False


TRAVEL_CHOICES: Dict[str, TravelChoiceDefinition] = {
    'shady_deal': TravelChoiceDefinition(
        choice_type=ChoiceType.SHADY_DEAL,
        title='Shady Deal',
        probability=0.12,
        templates=(
            ChoiceTemplate(
                text=('A nervous seller approaches: "I have {{ quantity }}x {{ good }} at '
                      '{{ discount }}% off. No questions asked..."'),
                risk_text="{{ risk }}% chance they're counterfeit",
                choices=(
                    ChoiceOption('accept', 'Accept the Risk', '⚠'),
                    ChoiceOption('decline', 'Walk Away', '✗'),
                ),
            ),
        ),
    ),
    'gambling': TravelChoiceDefinition(
        choice_type=ChoiceType.GAMBLING,
        title='Underground Casino',
        probability=0.08,
        templates=(
            ChoiceTemplate(
                text='You stumble upon an underground GPU casino. "Double or nothing on {{ amount | currency }}?"',
                risk_text='50% chance to double, 50% to lose it all',
                choices=(
                    ChoiceOption('gamble', 'Let it Ride', '🎲'),
                    ChoiceOption('decline', 'Too Risky', '✗'),
                ),
            ),
            ChoiceTemplate(
                text=('A high-stakes GPU auction is starting. Entry fee: {{ entry_fee | currency }}. '
                      'Mystery prize pool.'),
                risk_text='Could win big... or lose your entry',
                choices=(
                    ChoiceOption('enter', 'Enter Auction', '💰'),
                    ChoiceOption('decline', 'Skip It', '✗'),
                ),
            ),
        ),
    ),
    'intel': TravelChoiceDefinition(
        choice_type=ChoiceType.INTEL,
        title='Intel Offer',
        probability=0.10,
        templates=(
            ChoiceTemplate(
                text=('A former {{ company }} engineer whispers: "I know something about {{ good }} prices. '
                      '{{ cost | currency }} for the tip."'),
                risk_text='{{ accuracy }}% chance the intel is accurate',
                choices=(
                    ChoiceOption('buy', 'Buy the Intel', '🔍'),
                    ChoiceOption('decline', 'Pass', '✗'),
                ),
            ),
        ),
        companies=('OpenAI', 'Anthropic', 'Google DeepMind', 'Meta AI', 'NVIDIA', 'Microsoft'),
    ),
    'smuggler': TravelChoiceDefinition(
        choice_type=ChoiceType.SMUGGLER,
        title='Smuggler Contact',
        probability=0.06,
        requires_restricted_goods=True,
        templates=(
            ChoiceTemplate(
                text='A smuggler offers to move your restricted cargo past customs for {{ cost | currency }}.',
                risk_text='{{ success }}% success rate. Failure = total seizure',
                choices=(
                    ChoiceOption('use_smuggler', 'Use Smuggler', '🕵'),
                    ChoiceOption('decline', 'Take Normal Route', '✗'),
                ),
            ),
        ),
    ),
}


# =============================================================================
# ORACLE
# =============================================================================

@dataclass(frozen=True)
class OraclePrediction:
    text: str
    kind: str
    accuracy: float


ORACLE_NAME = 'The Algorithm'
ORACLE_ICON = '[◈◈◈]'
ORACLE_PROBABILITY = 0.15
ORACLE_BASE_COST = 5000
ORACLE_FREE_CHANCE = 0.3
ORACLE_REPUTATION_ACCURACY = 0.003

ORACLE_PREDICTIONS: List[OraclePrediction] = [
    OraclePrediction('I sense {{ good }} prices will surge within 2 turns...', 'price_up', 0.70),
    OraclePrediction('The market whispers of a {{ good }} crash coming...', 'price_down', 0.70),
    OraclePrediction('Customs will tighten at {{ market }} soon. Be warned.', 'customs', 0.65),
    OraclePrediction('A great opportunity approaches for those who hold {{ good }}...', 'opportunity', 0.60),
    OraclePrediction('I foresee turbulence. All markets will shift.', 'volatility', 0.55),
]

ORACLE_FREE_HINTS: List[str] = [
    'The winds favor the patient trader...',
    'Fortune smiles on those with diverse holdings...',
    'Beware the market that seems too calm...',
    'High debt invites misfortune...',
]
