"""Tests for booking domain events."""

import dataclasses

import pytest

from core.events import (
    BookingPhaseChanged,
    CartEvent,
    ContractEvent,
    ContractSigned,
    FileUploadFinished,
    UploadEvent,
    UserNotice,
)
from core.models import BookingPhase


class TestUserNotice:

    def test_info_uses_default_variant(self):
        notice = UserNotice.info("Contract Signed Successfully", "Recorded.")
        assert notice.variant == "default"

    def test_error_is_destructive(self):
        notice = UserNotice.error("Upload failed", "Failed to upload a.png")
        assert notice.variant == "destructive"
        assert notice.description == "Failed to upload a.png"


class TestEventBase:

    def test_events_are_frozen(self):
        event = ContractSigned.create(booking_id=3, signer_name="Jane Fletcher")
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.booking_id = 4

    def test_each_event_gets_id_and_timestamp(self):
        a = BookingPhaseChanged.create(previous=BookingPhase.BROWSING, current=BookingPhase.CHECKOUT)
        b = BookingPhaseChanged.create(previous=BookingPhase.CHECKOUT, current=BookingPhase.BROWSING)

        assert a.event_id != b.event_id
        assert a.occurred_at.tzinfo is not None

    @pytest.mark.parametrize("event_cls,family", [
        (BookingPhaseChanged, CartEvent),
        (FileUploadFinished, UploadEvent),
        (ContractSigned, ContractEvent),
    ])
    def test_families(self, event_cls, family):
        assert issubclass(event_cls, family)
