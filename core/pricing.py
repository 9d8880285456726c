"""
Pricing engine for cart items.

calculate_pricing is pure: it reads the items and configuration and returns
a new PricingBreakdown. Amounts are carried unrounded; round with
PricingBreakdown.rounded() or format_price() at display time only.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping

from core.config import PricingConfig
from core.models import CartItem, PricingBreakdown

_CURRENCY_SYMBOLS = {"GBP": "£", "EUR": "€", "USD": "$"}


def discount_rate_for(item_count: int, tiers: Mapping[int, Decimal]) -> Decimal:
    """
    Bulk discount rate for a cart with item_count distinct campaigns.

    The highest tier whose minimum is <= item_count wins. Counts below every
    tier (and empty tier tables) get no discount.
    """
    rate = Decimal(0)
    best_minimum = 0
    for minimum, tier_rate in tiers.items():
        if best_minimum < minimum <= item_count:
            best_minimum = minimum
            rate = Decimal(tier_rate)
    return rate


def calculate_pricing(
    items: Iterable[CartItem],
    config: PricingConfig | None = None,
) -> PricingBreakdown:
    """
    Compute the pricing breakdown for a list of cart items.

    Args:
        items: Cart lines; not modified
        config: Discount tiers and VAT rate (defaults apply when omitted)

    Returns:
        Unrounded PricingBreakdown; all zeros for an empty list
    """
    config = config or PricingConfig()
    items = list(items or [])

    if not items:
        return PricingBreakdown()

    subtotal = sum((item.total_price for item in items), Decimal(0))
    total_slots = sum(item.slots_required for item in items)
    total_adverts = sum(item.total_adverts for item in items)

    # Tiered on distinct campaigns, not slots
    discount_percentage = discount_rate_for(len(items), config.discount_tiers)
    discount_amount = subtotal * discount_percentage
    discounted_subtotal = subtotal - discount_amount

    vat = discounted_subtotal * config.vat_rate
    total = discounted_subtotal + vat

    return PricingBreakdown(
        subtotal=subtotal,
        discount_percentage=discount_percentage,
        discount_amount=discount_amount,
        discounted_subtotal=discounted_subtotal,
        vat=vat,
        total=total,
        total_slots=total_slots,
        total_adverts=total_adverts,
    )


def format_price(amount: Decimal | int | float | str, currency: str = "GBP") -> str:
    """
    Render an amount as UK-style currency, e.g. £1,234.50 or -£12.50.

    Raises:
        ValueError: If amount is not numeric
    """
    try:
        value = Decimal(str(amount))
    except ArithmeticError:
        raise ValueError(f"Cannot format non-numeric amount: {amount!r}")

    rounded = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    symbol = _CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def format_currency(amount: Decimal | int | float | str) -> str:
    """Alias of format_price in GBP."""
    return format_price(amount)
