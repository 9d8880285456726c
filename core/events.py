"""
Domain events for the booking core.

Immutable event objects describing what happened in a booking session.
Services publish; the UI layer (toasts, badges) and other services subscribe
without the publisher knowing who is listening.

Event Categories:
- CartEvent: cart contents and booking phase
- UploadEvent: per-file upload outcomes
- ContractEvent: contract signature outcomes
- UserNotice: a user-facing message (toast) for recoverable failures

Events carry snapshots so handlers never need to read back mutable state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.dates import now_utc


@dataclass(frozen=True, kw_only=True)
class BookingEvent:
    """Base class for all booking core events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# USER NOTICES
# =============================================================================


@dataclass(frozen=True)
class UserNotice(BookingEvent):
    """Message to show the user. variant is 'default' or 'destructive'."""
    title: str = ""
    description: str = ""
    variant: str = "default"

    @classmethod
    def info(cls, title: str, description: str) -> "UserNotice":
        return cls(title=title, description=description)

    @classmethod
    def error(cls, title: str, description: str) -> "UserNotice":
        return cls(title=title, description=description, variant="destructive")


# =============================================================================
# CART EVENTS
# =============================================================================


@dataclass(frozen=True)
class CartEvent(BookingEvent):
    """Events related to the cart and checkout journey."""
    pass


@dataclass(frozen=True)
class CartUpdated(CartEvent):
    """Cart contents changed. items is the new tuple of CartItem."""
    items: tuple = ()

    @classmethod
    def create(cls, items: tuple) -> "CartUpdated":
        return cls(items=items)


@dataclass(frozen=True)
class BookingPhaseChanged(CartEvent):
    """Booking phase moved."""
    previous: Any = None  # BookingPhase
    current: Any = None

    @classmethod
    def create(cls, previous: Any, current: Any) -> "BookingPhaseChanged":
        return cls(previous=previous, current=current)


@dataclass(frozen=True)
class BookingCreated(CartEvent):
    """The booking API accepted the order."""
    booking_id: int = 0
    customer: Any = None  # CustomerInfo

    @classmethod
    def create(cls, booking_id: int, customer: Any) -> "BookingCreated":
        return cls(booking_id=booking_id, customer=customer)


@dataclass(frozen=True)
class OrderCompleted(CartEvent):
    """Checkout finished; items moved to recent orders."""
    items: tuple = ()
    booking_id: int | None = None

    @classmethod
    def create(cls, items: tuple, booking_id: int | None = None) -> "OrderCompleted":
        return cls(items=items, booking_id=booking_id)


# =============================================================================
# UPLOAD EVENTS
# =============================================================================


@dataclass(frozen=True)
class UploadEvent(BookingEvent):
    """Events related to file uploads."""
    pass


@dataclass(frozen=True)
class FileUploadFinished(UploadEvent):
    """A file reached a terminal upload state (uploaded, completed or error)."""
    file: Any = None  # UploadedFile

    @classmethod
    def create(cls, file: Any) -> "FileUploadFinished":
        return cls(file=file)


@dataclass(frozen=True)
class CreativeSubmitted(UploadEvent):
    """Customer submitted creative assets for review."""
    booking_id: int | None = None
    files: tuple = ()

    @classmethod
    def create(cls, booking_id: int | None, files: tuple) -> "CreativeSubmitted":
        return cls(booking_id=booking_id, files=files)


# =============================================================================
# CONTRACT EVENTS
# =============================================================================


@dataclass(frozen=True)
class ContractEvent(BookingEvent):
    """Events related to the digital contract."""
    pass


@dataclass(frozen=True)
class ContractSigned(ContractEvent):
    """Contract signature was accepted by the booking API."""
    booking_id: int = 0
    signer_name: str = ""

    @classmethod
    def create(cls, booking_id: int, signer_name: str) -> "ContractSigned":
        return cls(booking_id=booking_id, signer_name=signer_name)
