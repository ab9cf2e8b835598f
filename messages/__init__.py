"""
Message rendering for Compute Wars.

Jinja2-based templates for every line of player-facing text: event
descriptions, encounter prompts, and the running turn summary.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, Optional
from jinja2 import Environment, DictLoader, StrictUndefined, TemplateNotFound


def format_money(amount) -> str:
    """Format number as whole-dollar currency: $12,345."""
    try:
        rounded = Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
        return f"${int(rounded):,}"
    except (ArithmeticError, ValueError, TypeError):
        return f"${amount}"


def format_percent(value) -> str:
    """Format number as percentage."""
    try:
        return f"{float(value):.1f}%"
    except (ValueError, TypeError):
        return f"{value}%"


# =============================================================================
# TURN SUMMARY TEMPLATES
# =============================================================================

DEFAULT_TEMPLATES = {
    # Trading
    'trade/discount_used': 'Used discount: -{{ percent }}%!',
    'trade/premium_used': 'Used premium: +{{ percent }}%!',
    'trade/bought': 'Bought {{ quantity }}x {{ good }} for {{ total | currency }}.',
    'trade/sold': 'Sold {{ quantity }}x {{ good }} for {{ total | currency }}.',

    # Travel
    'travel/encounter': 'An encounter during your journey...',
    'travel/departed': 'Traveled to {{ market }}.',
    'travel/arrived': 'Arrived at {{ market }}.',
    'travel/waited': 'Waited.',
    'customs/seized': 'Customs seized {{ quantity }}x {{ good }}!',
    'customs/insured': 'Insurance saved your {{ good }}!',

    # Finance
    'finance/borrowed': 'Borrowed {{ amount | currency }}.',
    'finance/paid': 'Paid {{ amount | currency }} toward debt.',
    'finance/interest': 'Debt interest: +{{ amount | currency }}.',
    'finance/net_worth': 'Net worth: {{ amount | currency }}',
    'upgrade/purchased': 'Purchased {{ upgrade }}.',

    # Encounter outcomes
    'choice/deal_success': 'Deal successful! Got {{ quantity }}x {{ good }} at {{ discount }}% off.',
    'choice/deal_unaffordable': "You can't afford the deal.",
    'choice/deal_no_room': 'No room in your cargo hold. The seller disappears into the crowd.',
    'choice/deal_counterfeit': 'Counterfeit! The goods were worthless. Lost {{ amount | currency }}.',
    'choice/deal_lucky': "Lucky break - you couldn't afford it anyway.",
    'choice/deal_declined': 'You walked away from the deal.',
    'choice/gamble_won': 'You won! Doubled your money: +{{ amount | currency }}',
    'choice/gamble_lost': 'You lost! -{{ amount | currency }}',
    'choice/auction_won': 'Auction win! Prize: {{ prize | currency }} (profit: +{{ profit | currency }})',
    'choice/auction_lost': 'Bad luck at the auction. Only got {{ prize | currency }} back.',
    'choice/gamble_declined': 'You passed on the gamble.',
    'choice/intel_bought': 'Intel acquired: "{{ good }} prices will {{ direction }} soon."',
    'choice/intel_declined': 'You passed on the intel.',
    'choice/smuggler_success': 'Smuggler succeeded! Your cargo made it through safely.',
    'choice/smuggler_caught': 'Smuggler caught! Lost all restricted cargo: {{ seized }}',
    'choice/smuggler_declined': 'You declined the smuggler. Taking the normal route.',

    # Endings
    'game_over/bankruptcy': 'Bankrupt. Debt of {{ debt | currency }} buried a net worth of {{ net_worth | currency }}.',
    'game_over/destitution': 'Destitute. No cash, no cargo, and no lender will take your call.',
}


class MessageRenderer:
    """
    Jinja2 environment for game text.

    Named templates come from DEFAULT_TEMPLATES; data tables hand in their
    own template source through render_text(). Undefined parameters raise
    instead of rendering blanks.
    """

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        self.env = Environment(
            loader=DictLoader(templates or DEFAULT_TEMPLATES),
            undefined=StrictUndefined,
            autoescape=False,
        )

        # Register custom filters
        self.env.filters['currency'] = format_money
        self.env.filters['percent'] = format_percent

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a named template with context."""
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            return f"[Template '{template_name}' not found]"
        return template.render(**context).strip()

    def render_text(self, source: str, context: Dict[str, Any]) -> str:
        """Render inline template source with context."""
        return self.env.from_string(source).render(**context).strip()


# Global renderer instance
_renderer: Optional[MessageRenderer] = None


def get_renderer() -> MessageRenderer:
    """Get or create the global message renderer."""
    global _renderer
    if _renderer is None:
        _renderer = MessageRenderer()
    return _renderer


def render(template_name: str, **context: Any) -> str:
    """Convenience function to render a named template."""
    return get_renderer().render(template_name, context)


def render_text(source: str, params: Dict[str, Any]) -> str:
    """Convenience function to render template source with a parameter map."""
    return get_renderer().render_text(source, params)
