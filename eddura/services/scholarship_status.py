import math
from datetime import datetime

from ..utils import parse_datetime

DAY_SECONDS = 86400


def _days_until(moment, now):
    return math.ceil((moment - now).total_seconds() / DAY_SECONDS)


def short_date(value):
    return f"{value:%b} {value.day}, {value.year}"


def long_date(value):
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def get_status(deadline, opening_date=None, now=None):
    """Open/closed state of a scholarship window plus the labels shown for it."""
    now = now or datetime.utcnow()
    deadline = parse_datetime(deadline)
    opening = parse_datetime(opening_date)

    days_until_deadline = _days_until(deadline, now)
    days_until_opening = _days_until(opening, now) if opening else None

    is_expired = days_until_deadline < 0
    is_not_yet_open = bool(opening and opening > now)
    is_opening_soon = days_until_opening is not None and 0 < days_until_opening <= 7
    is_open = not is_not_yet_open and not is_expired

    button = apply_button(is_expired, is_not_yet_open)
    return {
        "is_open": is_open,
        "is_expired": is_expired,
        "is_opening_soon": is_opening_soon,
        "is_not_yet_open": is_not_yet_open,
        "days_until_deadline": days_until_deadline,
        "days_until_opening": days_until_opening,
        "can_apply": not is_expired,
        "deadline_status": deadline_status_text(days_until_deadline, deadline, is_not_yet_open),
        "opening_status": opening_status_text(opening, days_until_opening, is_not_yet_open),
        "apply_button_text": button["text"],
        "apply_button_disabled": button["disabled"],
    }


def deadline_status_text(days_left, deadline, is_not_yet_open=False):
    if days_left < 0:
        return "Application Closed"
    if days_left <= 7:
        return f"Closes in {days_left} days"
    if days_left <= 30:
        return f"Closes {short_date(deadline)}"
    if is_not_yet_open:
        return "Prepare Application"
    return "Currently Accepting"


def opening_status_text(opening, days_until_opening, is_not_yet_open):
    if opening is None:
        return "Opening date not specified"
    if not is_not_yet_open:
        return "Currently Accepting"
    if days_until_opening <= 7:
        return f"Opens in {days_until_opening} days"
    return f"Opens {short_date(opening)}"


def apply_button(is_expired, is_not_yet_open):
    if is_expired:
        return {"text": "Application Closed", "disabled": True}
    if is_not_yet_open:
        return {"text": "Prepare Application", "disabled": False}
    return {"text": "Apply Now", "disabled": False}


def format_deadline(deadline, now=None):
    now = now or datetime.utcnow()
    deadline = parse_datetime(deadline)
    days = _days_until(deadline, now)
    if days < 0:
        return "Expired"
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if days <= 7:
        return f"{days} days left"
    return long_date(deadline)


def format_opening_date(opening_date, now=None):
    now = now or datetime.utcnow()
    opening = parse_datetime(opening_date)
    days = _days_until(opening, now)
    if days < 0:
        return "Opened"
    if days == 0:
        return "Opens today"
    if days == 1:
        return "Opens tomorrow"
    if days <= 7:
        return f"Opens in {days} days"
    return f"Opens {short_date(opening)}"
