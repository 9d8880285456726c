"""
Digital contract signature.

REVIEW -> SIGN -> COMPLETE, with SIGN -> REVIEW as the only way back.
The signature is captured as pointer strokes on a SignaturePad and sent as
an SVG data URL together with the agreement text and booking metadata.
After a successful submission the flow waits a short, visible delay before
calling on_signed and closing. close() cancels that wait.
"""

import asyncio
import base64
import logging
from typing import Callable, Iterable
from xml.sax.saxutils import escape

from clients.booking_api_client import BookingApiClient, BookingApiError
from core.event_bus import EventBus
from core.events import UserNotice, ContractSigned
from core.exceptions import InvalidSignatureStep
from core.models import (
    CampaignDetails,
    CartItem,
    ContractCustomer,
    ContractData,
    ContractSubmission,
    CustomerInfo,
    PricingBreakdown,
    SignatureStep,
)
from core.pricing import format_price
from utils.dates import now_utc, today_iso

logger = logging.getLogger(__name__)

COMPANY_NAME = "SouthCoast ProMotion"

_CONTRACT_TEMPLATE = """\
ADVERTISING CAMPAIGN AGREEMENT

This agreement is entered into between {company} ("Company") and {client} ("Client").

CAMPAIGN DETAILS:
- Campaign: {campaign}
- Date: {date}
- Time: {time}
- Slots Booked: {slots}
- Total Price: {price}

TERMS AND CONDITIONS:

1. PAYMENT TERMS
   - Payment is due within 30 days of invoice date
   - Late payments may incur a 1.5% monthly service charge
   - All prices are exclusive of VAT where applicable

2. CAMPAIGN DELIVERY
   - Campaign will run on the specified date and time
   - Client must provide creative materials 48 hours before campaign start
   - Materials must meet technical specifications provided separately

3. CANCELLATION POLICY
   - Cancellations made 7+ days before campaign: Full refund
   - Cancellations made 3-6 days before: 50% refund
   - Cancellations made less than 3 days: No refund

4. LIABILITY
   - Company liability limited to campaign cost
   - Client responsible for content compliance with ASA guidelines
   - Force majeure events may delay campaign without penalty

5. INTELLECTUAL PROPERTY
   - Client retains rights to provided creative materials
   - Company retains rights to campaign performance data
   - Neither party may use the other's trademarks without permission

By signing below, both parties agree to these terms and conditions.
"""


def build_contract_terms(campaign: CampaignDetails, customer: ContractCustomer) -> str:
    """Agreement text for a booking."""
    return _CONTRACT_TEMPLATE.format(
        company=COMPANY_NAME,
        client=customer.name,
        campaign=campaign.campaign,
        date=campaign.date,
        time=campaign.time,
        slots=campaign.slots,
        price=format_price(campaign.price),
    )


def campaign_details_for(items: Iterable[CartItem], pricing: PricingBreakdown) -> CampaignDetails:
    """
    Summarise cart lines for the agreement.

    Raises:
        ValueError: If items is empty
    """
    items = list(items)
    if not items:
        raise ValueError("Cannot build contract details for an empty cart")

    def _distinct(values):
        return ", ".join(dict.fromkeys(values))

    return CampaignDetails(
        campaign=_distinct(item.campaign_name for item in items),
        date=_distinct(item.date for item in items),
        time=_distinct(item.time for item in items),
        slots=sum(item.slots_required for item in items),
        price=pricing.rounded().total,
    )


def contract_customer_for(customer: CustomerInfo) -> ContractCustomer:
    return ContractCustomer(
        name=customer.customer_name,
        email=customer.customer_email,
        company=customer.company,
    )


class SignaturePad:
    """Freehand signature surface: a list of strokes, each a list of points."""

    def __init__(self, width: int = 500, height: int = 200):
        self.width = width
        self.height = height
        self._strokes: list[list[tuple[float, float]]] = []
        self._drawing = False

    @property
    def is_empty(self) -> bool:
        return not any(self._strokes)

    @property
    def strokes(self) -> list[list[tuple[float, float]]]:
        return [list(stroke) for stroke in self._strokes]

    def begin_stroke(self, x: float, y: float) -> None:
        self._strokes.append([self._clamp(x, y)])
        self._drawing = True

    def extend_stroke(self, x: float, y: float) -> None:
        """Add a point to the current stroke; ignored when the pointer is up."""
        if not self._drawing:
            return
        self._strokes[-1].append(self._clamp(x, y))

    def end_stroke(self) -> None:
        self._drawing = False

    def clear(self) -> None:
        self._strokes = []
        self._drawing = False

    def to_svg(self) -> str:
        paths = []
        for stroke in self._strokes:
            if not stroke:
                continue
            points = " ".join(f"{x:g},{y:g}" for x, y in stroke)
            paths.append(
                f'<polyline points="{escape(points)}" fill="none" stroke="#000" '
                f'stroke-width="2" stroke-linecap="round" stroke-linejoin="round"/>'
            )
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width}" '
            f'height="{self.height}" viewBox="0 0 {self.width} {self.height}">'
            + "".join(paths)
            + "</svg>"
        )

    def to_data_url(self) -> str:
        """Base64 SVG data URL of the signature; empty string when nothing was drawn."""
        if self.is_empty:
            return ""
        encoded = base64.b64encode(self.to_svg().encode("utf-8")).decode("ascii")
        return f"data:image/svg+xml;base64,{encoded}"

    def _clamp(self, x: float, y: float) -> tuple[float, float]:
        return (min(max(x, 0), self.width), min(max(y, 0), self.height))


class ContractSignature:
    """One contract signing dialog for a booking."""

    def __init__(
        self,
        booking_id: int,
        campaign: CampaignDetails,
        customer: ContractCustomer,
        api_client: BookingApiClient,
        on_signed: Callable[[], None],
        on_close: Callable[[], None] | None = None,
        event_bus: EventBus | None = None,
        confirmation_delay_seconds: float = 3.0,
    ):
        self.booking_id = booking_id
        self.campaign = campaign
        self.customer = customer
        self.api_client = api_client
        self.on_signed = on_signed
        self.on_close = on_close
        self.event_bus = event_bus or EventBus()
        self.confirmation_delay_seconds = confirmation_delay_seconds

        self.terms = build_contract_terms(campaign, customer)
        self.pad = SignaturePad()
        self.step = SignatureStep.REVIEW
        self.signer_name = customer.name
        self.signer_date = today_iso()
        self.is_processing = False
        self.is_open = True
        self.error: str | None = None
        self._confirmation_task: asyncio.Task | None = None

    # -------------------------------------------------------------------------
    # Step navigation
    # -------------------------------------------------------------------------

    def proceed_to_sign(self) -> None:
        if self.step != SignatureStep.REVIEW:
            raise InvalidSignatureStep("proceed to sign", self.step)
        self.step = SignatureStep.SIGN

    def back_to_review(self) -> None:
        if self.step != SignatureStep.SIGN:
            raise InvalidSignatureStep("go back to review", self.step)
        self.step = SignatureStep.REVIEW

    def clear_signature(self) -> None:
        self.pad.clear()

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def _reject(self, title: str, description: str) -> bool:
        self.error = description
        self.event_bus.publish(UserNotice.error(title, description))
        return False

    def build_submission(self, signature_data: str) -> ContractSubmission:
        return ContractSubmission(
            contract_signed=True,
            signature_data=signature_data,
            signer_name=self.signer_name.strip(),
            signer_date=self.signer_date,
            contract_data=ContractData(
                terms=self.terms,
                campaign_details=self.campaign,
                customer_info=self.customer,
                signed_at=now_utc(),
            ),
        )

    async def submit(self) -> bool:
        """
        Send the signed contract to the booking API.

        Missing signature or signer name is reported with a notice and no
        request is made. A submission already in flight is refused.

        Returns:
            True if the API accepted the contract

        Raises:
            InvalidSignatureStep: If not in the SIGN step
        """
        if self.step != SignatureStep.SIGN:
            raise InvalidSignatureStep("submit", self.step)

        if self.is_processing:
            logger.warning("Contract submission already in flight", extra={"booking_id": self.booking_id})
            return False

        signature_data = self.pad.to_data_url()
        if not signature_data:
            return self._reject(
                "Signature Required",
                "Please provide your signature before submitting.",
            )

        if not self.signer_name.strip():
            return self._reject(
                "Signer Name Required",
                "Please enter the name of the person signing.",
            )

        submission = self.build_submission(signature_data)
        self.is_processing = True
        self.error = None
        try:
            await asyncio.to_thread(
                self.api_client.submit_contract,
                self.booking_id,
                submission.to_payload(),
            )
        except BookingApiError as e:
            logger.error(f"Contract submission failed: {e}", extra={"booking_id": self.booking_id})
            return self._reject(
                "Signature Failed",
                "There was an error submitting your contract. Please try again.",
            )
        finally:
            self.is_processing = False

        self.step = SignatureStep.COMPLETE
        logger.info("Contract signed", extra={"booking_id": self.booking_id})
        self.event_bus.publish(ContractSigned.create(
            booking_id=self.booking_id,
            signer_name=submission.signer_name,
        ))
        self.event_bus.publish(UserNotice.info(
            "Contract Signed Successfully",
            "Your digital contract has been recorded securely.",
        ))
        self._confirmation_task = asyncio.create_task(self._confirm_after_delay())
        return True

    async def _confirm_after_delay(self) -> None:
        await asyncio.sleep(self.confirmation_delay_seconds)
        if not self.is_open:
            return
        self.on_signed()
        self._dispose()

    async def wait_closed(self) -> None:
        """Wait for the post-signature confirmation delay to finish."""
        if self._confirmation_task is not None:
            await asyncio.gather(self._confirmation_task, return_exceptions=True)

    async def close(self) -> None:
        """Close the dialog; a pending confirmation is cancelled and on_signed never fires."""
        task = self._confirmation_task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self._dispose()

    def _dispose(self) -> None:
        if not self.is_open:
            return
        self.is_open = False
        self.pad.clear()
        if self.on_close is not None:
            self.on_close()
