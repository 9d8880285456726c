"""
Booking flow: the single state machine for a customer's checkout journey.

    BROWSING -> CHECKOUT -> CUSTOMER_INFO -> CONTRACT_PENDING
             -> CREATIVE_PENDING -> CONFIRMED -> (finish) BROWSING

Contract and creative stages are skipped when BookingConfig does not require
them. Guards that depend on user input (empty cart, failed booking request)
publish a UserNotice and leave the phase unchanged. Calling an action from a
phase that does not define it is a programming error and raises
InvalidPhaseTransition.
"""

import logging

from clients.booking_api_client import BookingApiClient, BookingApiError
from core.config import BookingConfig
from core.event_bus import EventBus
from core.events import UserNotice, BookingCreated
from core.exceptions import InvalidPhaseTransition
from core.models import BookingPhase, CustomerInfo
from core.services.cart_service import CartStore

logger = logging.getLogger(__name__)


class BookingFlow:
    """Guarded navigation over a CartStore's booking phase."""

    def __init__(
        self,
        cart: CartStore,
        api_client: BookingApiClient,
        event_bus: EventBus | None = None,
        config: BookingConfig | None = None,
    ):
        self.cart = cart
        self.api_client = api_client
        self.event_bus = event_bus or cart.event_bus
        self.config = config or BookingConfig()
        self._reset_progress()

    def _reset_progress(self) -> None:
        self.booking_id: int | None = None
        self.customer: CustomerInfo | None = None
        self.contract_signed = False
        self.creative_uploaded = False

    @property
    def phase(self) -> BookingPhase:
        return self.cart.booking_phase

    def _require_phase(self, action: str, *allowed: BookingPhase) -> None:
        if self.phase not in allowed:
            raise InvalidPhaseTransition(action, self.phase)

    def _guard_cart_not_empty(self) -> bool:
        if not self.cart.is_empty:
            return True

        logger.warning(f"Blocked navigation from {self.phase.value}: cart is empty")
        self.event_bus.publish(UserNotice.error(
            "No items in cart",
            "Please add campaigns to your cart before proceeding.",
        ))
        return False

    # -------------------------------------------------------------------------
    # Cart navigation
    # -------------------------------------------------------------------------

    def checkout(self) -> bool:
        """
        BROWSING -> CHECKOUT.

        Returns:
            False (with a warning notice) if the cart is empty
        """
        self._require_phase("checkout", BookingPhase.BROWSING)
        if not self._guard_cart_not_empty():
            return False

        self.cart.set_cart_open(False)
        self.cart.set_booking_phase(BookingPhase.CHECKOUT)
        return True

    def back_to_cart(self) -> None:
        """CHECKOUT -> BROWSING."""
        self._require_phase("go back to cart", BookingPhase.CHECKOUT)
        self.cart.set_booking_phase(BookingPhase.BROWSING)

    def proceed_to_customer_info(self) -> bool:
        """
        CHECKOUT -> CUSTOMER_INFO.

        Returns:
            False (with a warning notice) if the cart is empty
        """
        self._require_phase("proceed to customer details", BookingPhase.CHECKOUT)
        if not self._guard_cart_not_empty():
            return False

        self.cart.set_booking_phase(BookingPhase.CUSTOMER_INFO)
        return True

    def back_to_checkout(self) -> None:
        """CUSTOMER_INFO -> CHECKOUT."""
        self._require_phase("go back to checkout", BookingPhase.CUSTOMER_INFO)
        self.cart.set_booking_phase(BookingPhase.CHECKOUT)

    # -------------------------------------------------------------------------
    # Post-checkout stages
    # -------------------------------------------------------------------------

    def submit_customer_info(self, customer: CustomerInfo) -> bool:
        """
        Create the booking and move to the next required stage.

        Returns:
            False if the cart is empty or the booking API rejected the request;
            the phase stays CUSTOMER_INFO so the user can retry.
        """
        self._require_phase("submit customer details", BookingPhase.CUSTOMER_INFO)
        if not self._guard_cart_not_empty():
            return False

        try:
            booking_id = self.api_client.create_booking(
                self.cart.items, customer, self.cart.pricing
            )
        except BookingApiError as e:
            logger.error(f"Booking creation failed: {e}")
            self.event_bus.publish(UserNotice.error(
                "Booking failed",
                "We could not create your booking. Please try again.",
            ))
            return False

        self.booking_id = booking_id
        self.customer = customer
        self.event_bus.publish(BookingCreated.create(booking_id=booking_id, customer=customer))
        self._advance()
        return True

    def mark_contract_signed(self) -> None:
        """CONTRACT_PENDING -> next stage. Called from the contract's signed callback."""
        self._require_phase("mark contract signed", BookingPhase.CONTRACT_PENDING)
        self.contract_signed = True
        self._advance()

    def mark_creative_uploaded(self) -> None:
        """CREATIVE_PENDING -> CONFIRMED. Called once creative assets are submitted."""
        self._require_phase("mark creative uploaded", BookingPhase.CREATIVE_PENDING)
        self.creative_uploaded = True
        self._advance()

    def finish(self) -> None:
        """CONFIRMED -> BROWSING with the order moved to recent orders."""
        self._require_phase("finish", BookingPhase.CONFIRMED)
        booking_id = self.booking_id
        self._reset_progress()
        self.cart.complete_order(booking_id=booking_id)

    def cancel(self) -> None:
        """Abandon the journey from any phase: clear cart and progress."""
        logger.info(f"Booking flow cancelled in phase {self.phase.value}")
        self._reset_progress()
        self.cart.clear_cart()

    def _advance(self) -> None:
        self.cart.set_booking_phase(self._next_stage())

    def _next_stage(self) -> BookingPhase:
        if self.config.require_contract and not self.contract_signed:
            return BookingPhase.CONTRACT_PENDING
        if self.config.require_creative and not self.creative_uploaded:
            return BookingPhase.CREATIVE_PENDING
        return BookingPhase.CONFIRMED
