from datetime import datetime, timedelta

import pytest

from eddura.errors import ValidationFailed
from eddura.services.scholarship_status import format_deadline, format_opening_date, get_status

NOW = datetime(2025, 1, 1, 12, 0)


def test_closing_soon() -> None:
    status = get_status("2025-01-05T12:00:00Z", now=NOW)
    assert status["is_open"] is True
    assert status["days_until_deadline"] == 4
    assert status["deadline_status"] == "Closes in 4 days"
    assert status["opening_status"] == "Opening date not specified"
    assert status["apply_button_text"] == "Apply Now"


def test_closing_this_month_shows_short_date() -> None:
    status = get_status(datetime(2025, 1, 20), now=NOW)
    assert status["deadline_status"] == "Closes Jan 20, 2025"


def test_expired() -> None:
    status = get_status(NOW - timedelta(days=3), now=NOW)
    assert status["is_expired"] is True
    assert status["is_open"] is False
    assert status["can_apply"] is False
    assert status["deadline_status"] == "Application Closed"
    assert status["apply_button_disabled"] is True


def test_not_yet_open() -> None:
    status = get_status(datetime(2025, 3, 1), opening_date=datetime(2025, 2, 1), now=NOW)
    assert status["is_not_yet_open"] is True
    assert status["is_open"] is False
    assert status["is_opening_soon"] is False
    assert status["can_apply"] is True
    assert status["deadline_status"] == "Prepare Application"
    assert status["opening_status"] == "Opens Feb 1, 2025"
    assert status["apply_button_text"] == "Prepare Application"
    assert status["apply_button_disabled"] is False


def test_opening_soon() -> None:
    status = get_status(datetime(2025, 3, 1), opening_date=NOW + timedelta(days=3), now=NOW)
    assert status["is_opening_soon"] is True
    assert status["opening_status"] == "Opens in 3 days"


def test_already_open() -> None:
    status = get_status(datetime(2025, 6, 1), opening_date=datetime(2024, 12, 1), now=NOW)
    assert status["is_open"] is True
    assert status["opening_status"] == "Currently Accepting"
    assert status["deadline_status"] == "Currently Accepting"


def test_format_deadline() -> None:
    assert format_deadline(NOW, now=NOW) == "Today"
    assert format_deadline(NOW + timedelta(hours=12), now=NOW) == "Tomorrow"
    assert format_deadline(NOW + timedelta(days=5), now=NOW) == "5 days left"
    assert format_deadline(NOW - timedelta(days=2), now=NOW) == "Expired"
    assert format_deadline(datetime(2025, 2, 10), now=NOW) == "Monday, February 10, 2025"


def test_format_opening_date() -> None:
    assert format_opening_date(NOW - timedelta(days=2), now=NOW) == "Opened"
    assert format_opening_date(NOW, now=NOW) == "Opens today"
    assert format_opening_date(NOW + timedelta(days=1), now=NOW) == "Opens tomorrow"
    assert format_opening_date(NOW + timedelta(days=6), now=NOW) == "Opens in 6 days"
    assert format_opening_date(datetime(2025, 3, 15), now=NOW) == "Opens Mar 15, 2025"


def test_invalid_date() -> None:
    with pytest.raises(ValidationFailed):
        get_status("not-a-date", now=NOW)
