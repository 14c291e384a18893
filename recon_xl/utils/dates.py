from datetime import date, datetime, time, timedelta, timezone
from typing import Any

# Excel stores dates as days since this epoch (the 1900 leap year bug is
# absorbed by starting on the 30th rather than the 31st).
EXCEL_EPOCH = datetime(1899, 12, 30)
MAX_EXCEL_SERIAL = 2958465


def parse_date(value: Any) -> datetime | None:
    """Convert a raw cell value to a `datetime`.

    Accepts `datetime` and `date` instances, ISO-8601 strings (date only or
    date and time, with an optional `Z` suffix) and Excel serial numbers.

    Returns:
        The parsed value, or `None` if it can't be interpreted as a date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, (int, float)):
        if 0 < value <= MAX_EXCEL_SERIAL:
            return EXCEL_EPOCH + timedelta(seconds=round(value * 86400))
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "zZ":
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def to_instant(value: datetime) -> datetime:
    """Return the UTC instant for `value`; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(value: date) -> str:
    """ISO representation; midnight datetimes are written as plain dates."""
    if isinstance(value, datetime):
        if value.tzinfo is None and value.time() == time():
            return value.date().isoformat()
        return value.isoformat()
    return value.isoformat()
