"""Date parsing utilities."""

from datetime import date, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Understands ISO and free-form dates ("2024-01-15", "Jan 15 2024") plus
    the words "today", "yesterday", "this month" and "last month" (first
    day of that month).

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    relative = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
    }
    if text in relative:
        return relative[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def get_date_range(period: str) -> tuple[date, date]:
    """Get (start, end) dates for this-month, last-month, this-year or last-year.

    Raises:
        ValueError: If period string is not recognized
    """
    key = period.strip().lower()
    today = date.today()
    first_of_month = today.replace(day=1)
    first_of_year = today.replace(month=1, day=1)

    if key == "this-month":
        return first_of_month, today
    if key == "last-month":
        return first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1)
    if key == "this-year":
        return first_of_year, today
    if key == "last-year":
        return first_of_year - relativedelta(years=1), first_of_year - timedelta(days=1)
    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-month, last-month, this-year, last-year"
    )
