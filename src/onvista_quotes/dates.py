import calendar
from datetime import date, datetime, timezone


def months_ago(months: int, from_: date | datetime | None = None) -> date | datetime:
    """
    Returns `from_` shifted back by `months` calendar months.

    Day-of-month is clamped to the last day of the target month, so
    2024-03-31 minus one month is 2024-02-29. `from_` defaults to now (UTC).
    """
    if months < 0:
        raise ValueError("months must not be negative")
    if from_ is None:
        from_ = datetime.now(timezone.utc)

    total = from_.year * 12 + (from_.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    day = min(from_.day, calendar.monthrange(year, month)[1])
    return from_.replace(year=year, month=month, day=day)


def format_iso_date(value: date | datetime) -> str:
    """YYYY-MM-DD. Aware datetimes are converted to UTC first."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.date()
    return value.isoformat()


def date_from_epoch(seconds: float) -> date:
    """UTC calendar date for an epoch-seconds timestamp."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc).date()
