"""Day counts between bar timestamps."""

from datetime import date, datetime, timezone

SECONDS_IN_A_DAY = 86400


def _parse(value: datetime | date | str | None) -> date | datetime | None:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def days_between(
    start: datetime | date | str | None,
    end: datetime | date | str | None,
) -> float | None:
    """
    Number of days from ``start`` to ``end``.

    Plain dates give a whole-day difference. Date-times on the same calendar
    day give a fractional day (seconds / 86400); otherwise whole days,
    truncated toward zero.

    Returns:
        Day count, or None if either side is missing or unparseable.
    """
    start_value = _parse(start)
    end_value = _parse(end)
    if start_value is None or end_value is None:
        return None

    if not isinstance(start_value, datetime) and not isinstance(end_value, datetime):
        return float((end_value - start_value).days)

    start_dt = _as_datetime(start_value)
    end_dt = _as_datetime(end_value)
    seconds = (end_dt - start_dt).total_seconds()

    if start_dt.date() == end_dt.date():
        return seconds / SECONDS_IN_A_DAY
    return float(int(seconds / SECONDS_IN_A_DAY))
