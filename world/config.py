"""
Tunable Constants - Compute Wars

The laws of the trading universe. Every number the engine uses to scale
risk, debt, or drift lives here so balancing never touches game logic.
"""

# =============================================================================
# STARTING CONDITIONS
# =============================================================================

STARTING_BALANCE = 10000
STARTING_INVENTORY_CAPACITY = 10
STARTING_REPUTATION = 50
STARTING_LOCATION = 'us-west'

MIN_REPUTATION = 0
MAX_REPUTATION = 100
REPUTATION_CENTER = 50

# =============================================================================
# DEBT
# =============================================================================

DEBT_BASE_INTEREST_RATE = 0.05
DEBT_MEDIUM_INTEREST_RATE = 0.08
DEBT_HIGH_INTEREST_RATE = 0.12
DEBT_MEDIUM_THRESHOLD = 0.5   # debt / net worth
DEBT_HIGH_THRESHOLD = 1.0
MAX_DEBT_MULTIPLIER = 2.0     # can borrow up to 2x net worth
BANKRUPTCY_MULTIPLIER = 3.0   # game over if debt > 3x net worth

# =============================================================================
# MARKET SIMULATION
# =============================================================================

SUPPLY_SHIFT_CHANCE = 0.10
PRICE_HISTORY_LENGTH = 8
RANDOM_WALK_WEIGHT = 0.9
MEAN_REVERSION_WEIGHT = 0.1
PRICE_FLOOR_FACTOR = 0.7
PRICE_CEILING_FACTOR = 1.3

# =============================================================================
# EVENTS
# =============================================================================

REPUTATION_EVENT_MODIFIER = 0.01   # per reputation point away from 50
OPPORTUNITY_TTL = 3                # turns a discount/premium offer stays open
AUDIT_WEALTH_SCALE = 10000000      # net worth that adds +1.0 audit probability
AUDIT_WEALTH_CAP = 0.05
PROTECTION_CHANCE = 0.5            # insurance / security suppression roll

# Seizure on arrival
SEIZURE_FLOOR = 0.05
SEIZURE_REPUTATION_FACTOR = 0.002
SEIZURE_MIN_FRACTION = 0.3
SEIZURE_FRACTION_SPREAD = 0.4

# Travel choices
TRAVEL_CHOICE_REPUTATION_WEIGHT = 0.3
