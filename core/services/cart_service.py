"""
Cart store for a booking session.

One CartStore is created per session and handed to every consumer; there is
no module-level cart. Each mutation builds the complete new item list and
swaps it in with a single assignment, so readers never observe a half-applied
change. Nothing is persisted.
"""

import logging

from core.config import PricingConfig
from core.event_bus import EventBus
from core.events import CartUpdated, BookingPhaseChanged, OrderCompleted
from core.models import CartItem, BookingPhase, PricingBreakdown
from core.pricing import calculate_pricing

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5


class CartStore:
    """In-memory cart keyed by campaign id, ordered by insertion."""

    def __init__(
        self,
        event_bus: EventBus | None = None,
        pricing_config: PricingConfig | None = None,
        recent_orders_limit: int = RECENT_ORDERS_LIMIT,
    ):
        self.event_bus = event_bus or EventBus()
        self.pricing_config = pricing_config or PricingConfig()
        self.recent_orders_limit = recent_orders_limit
        self._items: tuple[CartItem, ...] = ()
        self._booking_phase = BookingPhase.BROWSING
        self._recent_orders: tuple[tuple[CartItem, ...], ...] = ()
        self.is_cart_open = False

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def items(self) -> tuple[CartItem, ...]:
        return self._items

    @property
    def total_items(self) -> int:
        """Number of distinct campaigns in the cart (the "Cart (N)" count)."""
        return len(self._items)

    @property
    def total_slots(self) -> int:
        return sum(item.slots_required for item in self._items)

    @property
    def subtotal(self):
        return self.pricing.subtotal

    @property
    def pricing(self) -> PricingBreakdown:
        return calculate_pricing(self._items, self.pricing_config)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def booking_phase(self) -> BookingPhase:
        return self._booking_phase

    @property
    def recent_orders(self) -> tuple[tuple[CartItem, ...], ...]:
        return self._recent_orders

    def get_item(self, campaign_id: int) -> CartItem | None:
        for item in self._items:
            if item.campaign_id == campaign_id:
                return item
        return None

    def contains(self, campaign_id: int) -> bool:
        return self.get_item(campaign_id) is not None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_to_cart(self, item: CartItem) -> CartItem:
        """
        Add a campaign to the cart.

        If the campaign is already present its slot count grows by
        item.slots_required instead of adding a second line.

        Returns:
            The resulting cart line
        """
        existing = self.get_item(item.campaign_id)

        if existing is not None:
            merged = existing.with_slots(existing.slots_required + item.slots_required)
            self._replace_items(
                tuple(merged if i.campaign_id == item.campaign_id else i for i in self._items)
            )
            result = merged
        else:
            result = item.model_copy(deep=True)
            self._replace_items(self._items + (result,))

        self.is_cart_open = True
        logger.info(
            f"Added {item.slots_required} slot(s) of campaign {item.campaign_id}",
            extra={"campaign_id": item.campaign_id},
        )
        return result

    def update_cart_item(self, campaign_id: int, slots_required: int) -> CartItem | None:
        """
        Set the slot count for a campaign.

        A count of zero or less removes the line.

        Returns:
            Updated line, or None if it was removed or not in the cart
        """
        if slots_required <= 0:
            self.remove_from_cart(campaign_id)
            return None

        existing = self.get_item(campaign_id)
        if existing is None:
            logger.debug(f"Ignoring update for campaign {campaign_id}: not in cart")
            return None

        updated = existing.with_slots(slots_required)
        self._replace_items(
            tuple(updated if i.campaign_id == campaign_id else i for i in self._items)
        )
        return updated

    def remove_from_cart(self, campaign_id: int) -> bool:
        """
        Remove a campaign from the cart.

        Returns:
            True if removed, False if it was not in the cart
        """
        remaining = tuple(i for i in self._items if i.campaign_id != campaign_id)
        if len(remaining) == len(self._items):
            return False

        self._replace_items(remaining)
        logger.info(f"Removed campaign {campaign_id} from cart", extra={"campaign_id": campaign_id})
        return True

    def clear_cart(self) -> None:
        """Empty the cart and return to browsing."""
        self._replace_items(())
        self.set_booking_phase(BookingPhase.BROWSING)

    def set_booking_phase(self, phase: BookingPhase) -> None:
        """
        Set the booking phase without any guard.

        Guarded navigation lives in BookingFlow; this is the raw write path.
        """
        previous = self._booking_phase
        if previous == phase:
            return

        self._booking_phase = phase
        logger.info(f"Booking phase {previous.value} -> {phase.value}", extra={"phase": phase.value})
        self.event_bus.publish(BookingPhaseChanged.create(previous=previous, current=phase))

    def set_cart_open(self, is_open: bool) -> None:
        self.is_cart_open = is_open

    def reorder_items(self, order_items: list[CartItem]) -> None:
        """Replace the cart with a previous order's lines."""
        self._replace_items(tuple(CartItem.model_validate(i.model_dump()) for i in order_items))
        self.is_cart_open = True

    def complete_order(self, booking_id: int | None = None) -> tuple[CartItem, ...]:
        """
        Move the current items into recent orders and empty the cart.

        Returns:
            The completed items; empty tuple if the cart was empty
        """
        completed = self._items
        if not completed:
            return ()

        if self.recent_orders_limit:
            self._recent_orders = ((completed,) + self._recent_orders)[: self.recent_orders_limit]
        self.clear_cart()
        self.event_bus.publish(OrderCompleted.create(items=completed, booking_id=booking_id))
        return completed

    def _replace_items(self, items: tuple[CartItem, ...]) -> None:
        self._items = items
        self.event_bus.publish(CartUpdated.create(items=items))
