"""Utility modules for cross-cutting concerns."""

from utils.dates import (
    now_utc,
    today_iso,
    parse_uk_date,
    format_uk_date,
    is_valid_uk_date,
    format_time,
)
from utils.logging_setup import configure_logging, ContextFormatter
