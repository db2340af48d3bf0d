from datetime import date, datetime, timedelta, timezone

# Ages are whole 365-day years elapsed since the date of birth.
DAYS_PER_YEAR = 365


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def calculate_age(dob: date, now: date | datetime) -> int:
    """Whole years between ``dob`` and ``now``, counting 365 days per year."""
    days = (_as_date(now) - dob).days
    return int(days / DAYS_PER_YEAR)


def dob_range_for_age(age: int, now: date | datetime) -> tuple[date, date]:
    """Inclusive ``(earliest, latest)`` dates of birth that give exactly ``age``.

    Mirrors ``calculate_age`` so the filter can be pushed down into SQL.
    """
    today = _as_date(now)
    latest = today - timedelta(days=DAYS_PER_YEAR * age)
    earliest = today - timedelta(days=DAYS_PER_YEAR * (age + 1) - 1)
    return earliest, latest
