"""Campaign listing helpers: availability labels, filtering and location lists."""

import logging
from datetime import date
from typing import Iterable

from core.models import Campaign
from utils.dates import parse_uk_date

logger = logging.getLogger(__name__)

_AVAILABILITY_TEXT = {
    "available": "Available",
    "limited": "Limited",
    "full": "Fully Booked",
}

_NO_FILTER = ("", "all")


def availability_text(status: str) -> str:
    """Customer-facing label for an availability status; "Unknown" for anything unrecognised."""
    return _AVAILABILITY_TEXT.get(str(getattr(status, "value", status)), "Unknown")


def _parse_bound(value: str | None) -> date | None:
    if not value:
        return None
    return parse_uk_date(value)


def filter_campaigns(
    campaigns: Iterable[Campaign],
    location: str | None = None,
    availability: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
) -> list[Campaign]:
    """
    Filter campaigns; all criteria must match.

    Args:
        location: Case-insensitive substring of the campaign location;
            empty or "All" disables the filter
        availability: Exact status; empty or "All" disables the filter
        date_from: Inclusive lower bound, DD/MM/YYYY
        date_to: Inclusive upper bound, DD/MM/YYYY

    Raises:
        ValueError: If a date bound is not a valid UK date
    """
    lower = _parse_bound(date_from)
    upper = _parse_bound(date_to)
    location_query = (location or "").strip().lower()
    availability_query = (availability or "").strip().lower()

    results = []
    for campaign in campaigns:
        if location_query not in _NO_FILTER and location_query not in (campaign.location or "").lower():
            continue

        if availability_query not in _NO_FILTER and campaign.availability.value != availability_query:
            continue

        if lower or upper:
            try:
                campaign_date = parse_uk_date(campaign.date)
            except ValueError:
                logger.warning(f"Skipping campaign {campaign.id} with unparseable date '{campaign.date}'")
                continue
            if lower and campaign_date < lower:
                continue
            if upper and campaign_date > upper:
                continue

        results.append(campaign)

    return results


def extract_unique_locations(campaigns: Iterable[Campaign]) -> list[str]:
    """Sorted distinct non-empty locations."""
    return sorted({c.location.strip() for c in campaigns if c.location and c.location.strip()})
