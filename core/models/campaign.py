"""Campaign listing models as served by GET /api/campaigns."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from core.models.cart import CartItem


class Availability(str, Enum):
    """Availability status derived from remaining slots."""

    AVAILABLE = "available"
    LIMITED = "limited"
    FULL = "full"


class Campaign(BaseModel):
    """A schedulable advertising run customers book slots against."""

    id: int
    date: str
    time: str
    campaign: str
    location: str | None = None
    slots_available: int = Field(0, ge=0)
    number_adverts: int = Field(0, ge=0)
    price: Decimal = Field(..., ge=0)
    availability: Availability = Availability.AVAILABLE
    icon_url: str | None = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @property
    def is_bookable(self) -> bool:
        return self.availability != Availability.FULL and self.slots_available > 0

    def to_cart_item(self, slots_required: int = 1) -> CartItem:
        """
        Build a cart line for this campaign.

        Raises:
            ValueError: If the campaign is fully booked or too few slots remain
        """
        if not self.is_bookable:
            raise ValueError(f"Campaign {self.id} is fully booked")
        if slots_required > self.slots_available:
            raise ValueError(
                f"Campaign {self.id} has only {self.slots_available} slots available"
            )

        return CartItem(
            campaign_id=self.id,
            campaign_name=self.campaign,
            date=self.date,
            time=self.time,
            slots_required=slots_required,
            price_per_slot=self.price,
            adverts_per_slot=self.number_adverts,
            icon_url=self.icon_url,
        )
