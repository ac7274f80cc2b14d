# backend/utils/dates.py
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from utils.errors import ValidationError

# Movements dated by calendar day are stored at local noon, so a shift of a few
# hours (DST change, UTC conversion on the client) never moves them to another day.
MIDDAY = time(12, 0, 0)


def parse_calendar_date(value: str, field: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` string, raising ValidationError on bad input."""
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid {field}: expected YYYY-MM-DD, got {value!r}")


def resolve_occurred_at(value: Optional[str], now: Optional[datetime] = None) -> datetime:
    if not value:
        return now or datetime.now()
    day = parse_calendar_date(value, "occurredAtDate")
    return datetime.combine(day, MIDDAY)


def day_range(
    date_from: Optional[str], date_to: Optional[str], open_ended: bool = False
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Turn an inclusive pair of calendar days into ``[start, end)`` datetimes.

    A lone ``date_to`` selects everything up to the end of that day. A lone
    ``date_from`` selects that single day, or everything from that day on when
    ``open_ended`` is set.
    """
    start = end = None
    if date_from:
        start = datetime.combine(parse_calendar_date(date_from, "dateFrom"), time.min)
        if not date_to and not open_ended:
            end = start + timedelta(days=1)
    if date_to:
        end = datetime.combine(parse_calendar_date(date_to, "dateTo"), time.min) + timedelta(days=1)
    return start, end
