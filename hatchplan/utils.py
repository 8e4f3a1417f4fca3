"""Shared form parsing helpers and template filters."""

import re
from datetime import date, datetime

_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y")


def is_valid_email(value: str) -> bool:
    """Return True if *value* looks like a valid email address."""
    return bool(value and _EMAIL_RE.match(value.strip()))


def parse_date(value: str) -> date | None:
    """Parse an ISO (``2025-03-01``) or day-first (``01/03/2025``) date.

    Returns None for blank or unparseable input.
    """
    if not value:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


def parse_quantity(value: str) -> int | None:
    """Return the egg count in *value*, or None unless it is a positive integer."""
    try:
        quantity = int((value or "").strip())
    except ValueError:
        return None
    return quantity if quantity > 0 else None


def register_template_filters(app) -> None:
    @app.template_filter("day")
    def format_day(value):
        return value.strftime("%d/%m/%Y") if value else ""

    @app.template_filter("percent")
    def format_percent(value):
        return f"{round((value or 0) * 100)}%"


def selected_day(value: str = None) -> date:
    """The day a page is rendered for: ``?on=`` when given, otherwise today."""
    return parse_date(value) or date.today()
