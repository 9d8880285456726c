"""Shared test fixtures for the booking core test suite."""

from decimal import Decimal

import pytest

from clients.booking_api_client import BookingApiClient
from core.event_bus import EventBus
from core.models import CartItem, CustomerInfo
from core.services.cart_service import CartStore


# =============================================================================
# CONSTANTS
# =============================================================================

API_BASE = "https://bookings.southcoast.test"


# =============================================================================
# FACTORIES
# =============================================================================


def _make_item(
    campaign_id: int = 1,
    slots: int = 1,
    price: str = "100.00",
    adverts: int = 10,
    name: str | None = None,
) -> CartItem:
    """Build a CartItem with sensible defaults."""
    return CartItem(
        campaign_id=campaign_id,
        campaign_name=name or f"Campaign {campaign_id}",
        date="15/03/2025",
        time="09:00-17:00",
        slots_required=slots,
        price_per_slot=Decimal(price),
        adverts_per_slot=adverts,
    )


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def make_item():
    """Factory for CartItem instances."""
    return _make_item


@pytest.fixture
def api_base() -> str:
    return API_BASE


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def notices(event_bus) -> list:
    """Every UserNotice published on the shared bus, in order."""
    received = []
    event_bus.subscribe("UserNotice", received.append)
    return received


@pytest.fixture
def cart(event_bus) -> CartStore:
    return CartStore(event_bus=event_bus)


@pytest.fixture
def api_client() -> BookingApiClient:
    return BookingApiClient(base_url=API_BASE, timeout=5)


@pytest.fixture
def customer() -> CustomerInfo:
    return CustomerInfo(
        customer_name="Jane Fletcher",
        customer_email="Jane@SouthcoastBakery.co.uk",
        customer_phone="01234 567890",
        company="Southcoast Bakery",
    )
