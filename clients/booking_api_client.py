"""
HTTP client for the SouthCoast booking API.

The booking API is an external collaborator: this client only shapes JSON
and multipart requests and maps every failure (connection error or non-2xx)
to BookingApiError.
"""

import json
import logging
from typing import Any, Iterable

import requests

from core.models import Campaign, CartItem, CustomerInfo, PricingBreakdown

logger = logging.getLogger(__name__)

CAMPAIGNS_PATH = "/api/campaigns"
BOOKINGS_PATH = "/api/bookings"
CUSTOMER_BOOKINGS_PATH = "/api/customer/bookings"


class BookingApiError(Exception):
    """Raised when a booking API request fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class BookingApiClient:
    """Talk to the booking API over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        """
        Initialize with the API location.

        Args:
            base_url: Scheme and host, e.g. https://bookings.example.co.uk
            timeout: Per-request timeout in seconds
            session: Optional requests session (connection reuse, auth headers)

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send a request and fail on anything but 2xx.

        Raises:
            BookingApiError: On connection failure or non-2xx status
        """
        url = self._url(path)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Booking API connection failed: {method} {url}: {e}")
            raise BookingApiError(f"Connection failed: {e}")

        if not 200 <= response.status_code < 300:
            logger.error(f"Booking API error: {method} {url} -> {response.status_code}")
            raise BookingApiError(
                f"{method} {path} failed: {response.status_code} {response.reason or ''}".strip(),
                status_code=response.status_code,
            )

        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            raise BookingApiError(
                "Server returned non-JSON response", status_code=response.status_code
            )
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError):
            logger.error(f"Booking API returned invalid JSON: {response.text[:200]}")
            raise BookingApiError("Invalid JSON from booking API", status_code=response.status_code)

    @staticmethod
    def _optional_json(response: requests.Response) -> dict:
        """Reply body as a dict when it is a JSON object, else {}."""
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            logger.debug(f"Ignoring non-JSON reply body from {response.url}")
            return {}
        return data if isinstance(data, dict) else {}

    def list_campaigns(self) -> list[Campaign]:
        """
        Fetch campaign listings.

        Accepts either a bare list or {"campaigns": [...]}.

        Raises:
            BookingApiError: On any failure
        """
        response = self._request("GET", CAMPAIGNS_PATH, headers={"Accept": "application/json"})
        data = self._json(response)

        if isinstance(data, dict):
            data = data.get("campaigns", [])
        if not isinstance(data, list):
            raise BookingApiError("Unexpected campaigns payload", status_code=response.status_code)

        return [Campaign.model_validate(row) for row in data]

    def create_booking(
        self,
        items: Iterable[CartItem],
        customer: CustomerInfo,
        pricing: PricingBreakdown,
    ) -> int:
        """
        Create a booking for the cart contents.

        Returns:
            Booking id assigned by the API

        Raises:
            BookingApiError: On any failure or if the response has no id
        """
        rounded = pricing.rounded()
        payload = {
            **customer.model_dump(mode="json", by_alias=True, exclude_none=True),
            "items": [
                {
                    "campaignId": item.campaign_id,
                    "slotsRequired": item.slots_required,
                    "pricePerSlot": str(item.price_per_slot),
                }
                for item in items
            ],
            "pricing": {
                "subtotal": str(rounded.subtotal),
                "discountAmount": str(rounded.discount_amount),
                "vat": str(rounded.vat),
                "total": str(rounded.total),
            },
        }
        response = self._request("POST", BOOKINGS_PATH, json=payload)
        data = self._json(response)
        if not isinstance(data, dict):
            raise BookingApiError("Unexpected booking payload", status_code=response.status_code)

        booking_id = data.get("bookingId")
        if booking_id is None:
            booking_id = data.get("id")
        if booking_id is None and isinstance(data.get("booking"), dict):
            booking_id = data["booking"].get("id")
        if booking_id is None:
            raise BookingApiError("Booking response did not include an id", status_code=response.status_code)

        logger.info(f"Booking {booking_id} created", extra={"booking_id": booking_id})
        return int(booking_id)

    def submit_contract(self, booking_id: int, payload: dict) -> dict:
        """
        Record a signed contract against a booking.

        Any 2xx counts as accepted; the reply body is returned when it is
        JSON and ignored otherwise.

        Raises:
            BookingApiError: On connection failure or non-2xx status
        """
        response = self._request(
            "POST",
            f"{CUSTOMER_BOOKINGS_PATH}/{booking_id}/contract",
            json=payload,
        )
        logger.info(f"Contract submitted for booking {booking_id}", extra={"booking_id": booking_id})
        return self._optional_json(response)

    def upload_file(
        self,
        endpoint: str,
        filename: str,
        content: bytes,
        mime_type: str,
        fields: dict[str, str] | None = None,
    ) -> dict:
        """
        POST one file as multipart/form-data.

        Args:
            endpoint: Path or absolute URL of the upload endpoint
            filename: Original filename
            content: File bytes
            mime_type: File MIME type
            fields: Extra form fields sent alongside the file

        Raises:
            BookingApiError: On any failure
        """
        response = self._request(
            "POST",
            endpoint,
            files={"file": (filename, content, mime_type)},
            data={key: str(value) for key, value in (fields or {}).items()},
        )
        return self._optional_json(response)
