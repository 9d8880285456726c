"""Pricing breakdown model. Derived from cart items, never persisted."""

from decimal import Decimal, ROUND_HALF_UP

from pydantic import BaseModel

PENNY = Decimal("0.01")


class PricingBreakdown(BaseModel):
    """Unrounded pricing totals for a set of cart items."""

    subtotal: Decimal = Decimal(0)
    discount_percentage: Decimal = Decimal(0)
    discount_amount: Decimal = Decimal(0)
    discounted_subtotal: Decimal = Decimal(0)
    vat: Decimal = Decimal(0)
    total: Decimal = Decimal(0)
    total_slots: int = 0
    total_adverts: int = 0

    model_config = {"frozen": True}

    def rounded(self) -> "PricingBreakdown":
        """Copy with every currency amount rounded to pence for display."""
        return PricingBreakdown(
            subtotal=_to_pence(self.subtotal),
            discount_percentage=self.discount_percentage,
            discount_amount=_to_pence(self.discount_amount),
            discounted_subtotal=_to_pence(self.discounted_subtotal),
            vat=_to_pence(self.vat),
            total=_to_pence(self.total),
            total_slots=self.total_slots,
            total_adverts=self.total_adverts,
        )

    @property
    def discount_percent_display(self) -> int:
        """Whole-number percentage, e.g. 10 for a 0.10 rate."""
        return int((self.discount_percentage * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _to_pence(amount: Decimal) -> Decimal:
    return amount.quantize(PENNY, rounding=ROUND_HALF_UP)
