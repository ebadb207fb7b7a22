import math
from datetime import date, datetime

import pandas as pd


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def to_timestamp(value) -> pd.Timestamp | None:
    """
    Parse a record or filter value into a naive Timestamp, or None.
    Timezone-aware values keep their written wall-clock time.
    """
    if _is_blank(value):
        return None
    try:
        if isinstance(value, (pd.Timestamp, datetime, date)):
            ts = pd.Timestamp(value)
        else:
            ts = pd.to_datetime(str(value).strip())
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def start_of_day(value) -> pd.Timestamp | None:
    ts = to_timestamp(value)
    return ts.normalize() if ts is not None else None


def end_of_day(value) -> pd.Timestamp | None:
    """Last millisecond of the value's calendar day (23:59:59.999)."""
    ts = to_timestamp(value)
    if ts is None:
        return None
    return ts.normalize() + pd.Timedelta(days=1) - pd.Timedelta(milliseconds=1)


def format_readable_date(value, default: str = "-") -> str:
    """Render e.g. '31 January 2025, 11:59 PM'."""
    ts = to_timestamp(value)
    if ts is None:
        return default
    hour = ts.hour % 12 or 12
    ampm = "PM" if ts.hour >= 12 else "AM"
    return f"{ts.day} {ts.strftime('%B')} {ts.year}, {hour}:{ts.minute:02d} {ampm}"
