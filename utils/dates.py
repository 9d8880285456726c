"""UTC clock and UK date formatting. Campaign dates travel as DD/MM/YYYY strings."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

UK_TIMEZONE = "Europe/London"


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def today_iso(tz_name: str = UK_TIMEZONE) -> str:
    """Today's date in the given timezone as YYYY-MM-DD."""
    try:
        local_tz = ZoneInfo(tz_name)
    except KeyError:
        raise ValueError(f"Unknown timezone: {tz_name}")

    return now_utc().astimezone(local_tz).date().isoformat()


def parse_uk_date(value: str) -> date:
    """
    Parse a DD/MM/YYYY string.

    Raises ValueError if the string is not a real calendar date.
    """
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        raise ValueError(f"Invalid UK date '{value}', expected DD/MM/YYYY")


def format_uk_date(value: date) -> str:
    """Render a date as DD/MM/YYYY."""
    return value.strftime("%d/%m/%Y")


def is_valid_uk_date(value: str) -> bool:
    try:
        parse_uk_date(value)
    except ValueError:
        return False
    return True


def format_time(value: str) -> str:
    """
    Render "HH:MM" or "HH:MM-HH:MM" in 12-hour form.

    Strings without a colon are returned unchanged.
    """
    if "-" in value:
        start, end = value.split("-", 1)
        return f"{_format_single_time(start)} - {_format_single_time(end)}"
    return _format_single_time(value)


def _format_single_time(value: str) -> str:
    value = value.strip()
    if ":" not in value:
        return value

    hours, minutes = value.split(":", 1)
    hour = int(hours)
    period = "PM" if hour >= 12 else "AM"
    display_hour = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    return f"{display_hour}:{minutes} {period}"
