"""Cart domain models.

Prices are Decimal pounds. Rounding to pence happens only when a value is
formatted for display.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


class BookingPhase(str, Enum):
    """Step of the customer's checkout journey."""

    BROWSING = "browsing"
    CHECKOUT = "checkout"
    CUSTOMER_INFO = "customer_info"
    CONTRACT_PENDING = "contract_pending"
    CREATIVE_PENDING = "creative_pending"
    CONFIRMED = "confirmed"


class CartItem(BaseModel):
    """One campaign booking line in the cart."""

    campaign_id: int
    campaign_name: str = Field(..., min_length=1, max_length=200)
    date: str = Field(..., description="DD/MM/YYYY")
    time: str = Field(..., description="HH:MM or HH:MM-HH:MM")
    slots_required: int = Field(..., ge=1)
    price_per_slot: Decimal = Field(..., ge=0)
    total_price: Decimal = Decimal(0)
    adverts_per_slot: int = Field(0, ge=0)
    icon_url: str | None = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @model_validator(mode="after")
    def compute_total_price(self) -> "CartItem":
        """total_price is always price_per_slot * slots_required; any supplied value is replaced."""
        self.total_price = self.price_per_slot * self.slots_required
        return self

    def with_slots(self, slots_required: int) -> "CartItem":
        """Copy of this item with a new slot count and recomputed total."""
        data = self.model_dump()
        data["slots_required"] = slots_required
        return CartItem.model_validate(data)

    @property
    def total_adverts(self) -> int:
        return self.adverts_per_slot * self.slots_required
