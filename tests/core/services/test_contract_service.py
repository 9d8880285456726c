"""Tests for contract signature capture and submission."""

import asyncio
import base64
import json
import threading
from decimal import Decimal

import pytest
import responses

from core.exceptions import InvalidSignatureStep
from core.models import CampaignDetails, ContractCustomer, SignatureStep
from core.pricing import calculate_pricing
from core.services.contract_service import (
    ContractSignature,
    SignaturePad,
    build_contract_terms,
    campaign_details_for,
    contract_customer_for,
)


@pytest.fixture
def contract_url(api_base):
    return f"{api_base}/api/customer/bookings/77/contract"


@pytest.fixture
def campaign_details():
    return CampaignDetails(
        campaign="Eastbourne Pier",
        date="20/05/2025",
        time="10:00-16:00",
        slots=3,
        price=Decimal("540.00"),
    )


@pytest.fixture
def contract_customer():
    return ContractCustomer(name="Jane Fletcher", email="jane@southcoastbakery.co.uk", company="Southcoast Bakery")


@pytest.fixture
def signed_calls():
    return []


@pytest.fixture
def signature(api_client, event_bus, campaign_details, contract_customer, signed_calls):
    return ContractSignature(
        booking_id=77,
        campaign=campaign_details,
        customer=contract_customer,
        api_client=api_client,
        on_signed=lambda: signed_calls.append("signed"),
        event_bus=event_bus,
        confirmation_delay_seconds=0,
    )


def _sign(signature):
    signature.proceed_to_sign()
    signature.pad.begin_stroke(10, 20)
    signature.pad.extend_stroke(40, 60)
    signature.pad.end_stroke()


class TestSignaturePad:

    def test_starts_empty(self):
        pad = SignaturePad()
        assert pad.is_empty
        assert pad.to_data_url() == ""

    def test_strokes_and_clamping(self):
        pad = SignaturePad(width=100, height=50)
        pad.begin_stroke(-5, 10)
        pad.extend_stroke(150, 80)
        pad.end_stroke()

        assert pad.strokes == [[(0, 10), (100, 50)]]

    def test_move_without_pointer_down_ignored(self):
        pad = SignaturePad()
        pad.begin_stroke(1, 1)
        pad.end_stroke()
        pad.extend_stroke(5, 5)

        assert pad.strokes == [[(1, 1)]]

    def test_data_url_is_base64_svg(self):
        pad = SignaturePad()
        pad.begin_stroke(1, 2)
        pad.extend_stroke(3, 4)

        url = pad.to_data_url()
        prefix = "data:image/svg+xml;base64,"

        assert url.startswith(prefix)
        svg = base64.b64decode(url[len(prefix):]).decode("utf-8")
        assert svg.startswith("<svg")
        assert 'points="1,2 3,4"' in svg

    def test_clear(self):
        pad = SignaturePad()
        pad.begin_stroke(1, 1)
        pad.clear()
        assert pad.is_empty


class TestContractTerms:

    def test_terms_include_booking_details(self, campaign_details, contract_customer):
        terms = build_contract_terms(campaign_details, contract_customer)

        assert "ADVERTISING CAMPAIGN AGREEMENT" in terms
        assert '"Company") and Jane Fletcher ("Client")' in terms
        assert "- Campaign: Eastbourne Pier" in terms
        assert "- Slots Booked: 3" in terms
        assert "- Total Price: £540.00" in terms
        assert "Cancellations made 7+ days before campaign: Full refund" in terms

    def test_campaign_details_from_cart(self, make_item):
        items = [
            make_item(campaign_id=1, slots=2, price="100", name="Brighton Marina"),
            make_item(campaign_id=2, slots=1, price="50", name="Hove Lawns"),
        ]

        details = campaign_details_for(items, calculate_pricing(items))

        assert details.campaign == "Brighton Marina, Hove Lawns"
        assert details.date == "15/03/2025"
        assert details.slots == 3
        assert details.price == Decimal("270.00")

    def test_campaign_details_need_items(self):
        with pytest.raises(ValueError, match="empty cart"):
            campaign_details_for([], calculate_pricing([]))

    def test_contract_customer_from_customer_info(self, customer):
        converted = contract_customer_for(customer)
        assert converted.name == "Jane Fletcher"
        assert converted.company == "Southcoast Bakery"


class TestSteps:

    def test_initial_state(self, signature):
        assert signature.step == SignatureStep.REVIEW
        assert signature.signer_name == "Jane Fletcher"
        assert len(signature.signer_date) == 10
        assert signature.is_open

    def test_review_sign_review(self, signature):
        signature.proceed_to_sign()
        assert signature.step == SignatureStep.SIGN

        signature.back_to_review()
        assert signature.step == SignatureStep.REVIEW

    def test_cannot_go_back_from_review(self, signature):
        with pytest.raises(InvalidSignatureStep):
            signature.back_to_review()

    def test_cannot_submit_from_review(self, signature):
        with pytest.raises(InvalidSignatureStep, match="review"):
            asyncio.run(signature.submit())


class TestSubmitValidation:

    @responses.activate
    def test_missing_signature_makes_no_request(self, signature, notices):
        signature.proceed_to_sign()

        assert asyncio.run(signature.submit()) is False

        assert len(responses.calls) == 0
        assert notices[-1].title == "Signature Required"
        assert signature.step == SignatureStep.SIGN

    @responses.activate
    def test_blank_signer_name_makes_no_request(self, signature, notices):
        _sign(signature)
        signature.signer_name = "   "

        assert asyncio.run(signature.submit()) is False

        assert len(responses.calls) == 0
        assert notices[-1].title == "Signer Name Required"


class TestSubmit:

    @responses.activate
    def test_success_completes_then_calls_on_signed(self, signature, contract_url, signed_calls, event_bus):
        responses.add(responses.POST, contract_url, json={"ok": True}, status=200)
        signed_events = []
        event_bus.subscribe("ContractSigned", signed_events.append)
        closed = []
        signature.on_close = lambda: closed.append(True)
        _sign(signature)

        async def scenario():
            accepted = await signature.submit()
            assert signature.step == SignatureStep.COMPLETE
            await signature.wait_closed()
            return accepted

        assert asyncio.run(scenario()) is True
        assert signed_calls == ["signed"]
        assert closed == [True]
        assert signature.is_open is False
        assert signature.pad.is_empty
        assert signed_events[0].booking_id == 77

    @responses.activate
    def test_plain_text_reply_still_completes(self, signature, contract_url, signed_calls, notices):
        responses.add(responses.POST, contract_url, body="OK", content_type="text/plain", status=200)
        _sign(signature)

        async def scenario():
            accepted = await signature.submit()
            assert signature.step == SignatureStep.COMPLETE
            await signature.wait_closed()
            return accepted

        assert asyncio.run(scenario()) is True
        assert signed_calls == ["signed"]
        assert signature.error is None
        assert notices[-1].title == "Contract Signed Successfully"

    @responses.activate
    def test_second_submit_refused_while_first_in_flight(self, signature, contract_url, signed_calls):
        entered = threading.Event()
        release = threading.Event()

        def slow_reply(request):
            entered.set()
            release.wait(5)
            return (200, {}, "{}")

        responses.add_callback(
            responses.POST, contract_url, callback=slow_reply, content_type="application/json",
        )
        _sign(signature)

        async def scenario():
            first = asyncio.create_task(signature.submit())
            assert await asyncio.to_thread(entered.wait, 5)
            assert signature.is_processing is True
            second = await signature.submit()
            release.set()
            first_result = await first
            await signature.wait_closed()
            return first_result, second

        assert asyncio.run(scenario()) == (True, False)
        assert len(responses.calls) == 1
        assert signed_calls == ["signed"]

    @responses.activate
    def test_payload_shape(self, signature, contract_url):
        responses.add(responses.POST, contract_url, json={}, status=200)
        _sign(signature)

        async def scenario():
            await signature.submit()
            await signature.wait_closed()

        asyncio.run(scenario())

        body = json.loads(responses.calls[0].request.body)
        assert body["contractSigned"] is True
        assert body["signatureData"].startswith("data:image/svg+xml;base64,")
        assert body["signerName"] == "Jane Fletcher"
        assert set(body["contractData"]) == {"terms", "campaignDetails", "customerInfo", "signedAt"}
        assert body["contractData"]["campaignDetails"]["slots"] == 3

    @responses.activate
    def test_failure_stays_in_sign_and_can_retry(self, signature, contract_url, signed_calls, notices):
        responses.add(responses.POST, contract_url, json={"error": "nope"}, status=500)
        responses.add(responses.POST, contract_url, json={}, status=200)
        _sign(signature)

        async def scenario():
            first = await signature.submit()
            assert signature.step == SignatureStep.SIGN
            assert signature.error
            assert signature.is_processing is False
            second = await signature.submit()
            await signature.wait_closed()
            return first, second

        assert asyncio.run(scenario()) == (False, True)
        assert notices[0].title == "Signature Failed"
        assert signed_calls == ["signed"]

    @responses.activate
    def test_close_during_delay_suppresses_on_signed(
        self, api_client, event_bus, campaign_details, contract_customer, contract_url,
    ):
        responses.add(responses.POST, contract_url, json={}, status=200)
        signed = []
        signature = ContractSignature(
            booking_id=77,
            campaign=campaign_details,
            customer=contract_customer,
            api_client=api_client,
            on_signed=lambda: signed.append(True),
            event_bus=event_bus,
            confirmation_delay_seconds=60,
        )
        _sign(signature)

        async def scenario():
            await signature.submit()
            await signature.close()
            await signature.wait_closed()

        asyncio.run(scenario())

        assert signed == []
        assert signature.is_open is False
