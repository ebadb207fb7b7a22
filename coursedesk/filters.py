"""Filter engine for in-memory record lists.

Each filter builds a boolean mask over a small object-dtype frame of the
fields it reads; the masks are AND-ed and the surviving records are picked
out of the input list, so the filtered list holds the very same dict
objects in the same order.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

import pandas as pd

from coursedesk.dates import _is_blank, end_of_day, start_of_day, to_timestamp

Record = dict[str, Any]


class RecordFilter(Protocol):
    @property
    def fields(self) -> tuple[str, ...]: ...

    @property
    def active(self) -> bool: ...

    def mask(self, frame: pd.DataFrame) -> pd.Series: ...

    def describe(self) -> str: ...


def _as_text(value) -> str:
    return "" if _is_blank(value) else str(value)


@dataclass(frozen=True)
class TextFilter:
    """Case-insensitive substring match against any of ``columns``."""

    columns: tuple[str, ...]
    value: str = ""
    formatter: Callable[[Any], str] | None = None

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.columns)

    @property
    def active(self) -> bool:
        return bool(_as_text(self.value).strip())

    def mask(self, frame: pd.DataFrame) -> pd.Series:
        needle = _as_text(self.value).strip()
        hits = pd.Series(False, index=frame.index)
        for column in self.columns:
            values = frame[column]
            if self.formatter is not None:
                values = values.map(lambda v: "" if _is_blank(v) else self.formatter(v))
            text = values.map(_as_text)
            hits |= text.str.contains(needle, case=False, regex=False)
        return hits

    def describe(self) -> str:
        return _as_text(self.value).strip()


@dataclass(frozen=True)
class ExactFilter:
    """Equality against one selected option, or any of several."""

    column: str
    value: Any = None
    case_sensitive: bool = True

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.column,)

    def options(self) -> list[str]:
        if isinstance(self.value, (list, tuple, set, frozenset)):
            values = list(self.value)
        else:
            values = [self.value]
        options = [_as_text(v) for v in values if _as_text(v) != ""]
        if not self.case_sensitive:
            options = [o.casefold() for o in options]
        return options

    @property
    def active(self) -> bool:
        return bool(self.options())

    def mask(self, frame: pd.DataFrame) -> pd.Series:
        values = frame[self.column].map(_as_text)
        if not self.case_sensitive:
            values = values.str.casefold()
        return values.isin(self.options())

    def describe(self) -> str:
        return "-".join(self.options())


@dataclass(frozen=True)
class DateRangeFilter:
    """Inclusive calendar-day range over a timestamp field."""

    column: str
    from_date: date | str | None = None
    to_date: date | str | None = None

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.column,)

    @property
    def active(self) -> bool:
        return start_of_day(self.from_date) is not None or end_of_day(self.to_date) is not None

    def mask(self, frame: pd.DataFrame) -> pd.Series:
        lower = start_of_day(self.from_date)
        upper = end_of_day(self.to_date)
        stamps = frame[self.column].map(to_timestamp)
        keep = pd.Series(True, index=frame.index)
        if lower is not None:
            keep &= stamps.map(lambda ts: ts is not None and ts >= lower).astype(bool)
        if upper is not None:
            keep &= stamps.map(lambda ts: ts is not None and ts <= upper).astype(bool)
        return keep

    def describe(self) -> str:
        lower = start_of_day(self.from_date)
        upper = start_of_day(self.to_date)
        parts = [
            lower.strftime("%Y-%m-%d") if lower is not None else "start",
            upper.strftime("%Y-%m-%d") if upper is not None else "today",
        ]
        return "-to-".join(parts)


def apply_filters(records: list[Record], filters: Iterable[RecordFilter]) -> list[Record]:
    """Return the records that satisfy every active filter."""
    active = [f for f in filters if f.active]
    if not active or not records:
        return list(records)

    columns = sorted({c for f in active for c in f.fields})
    frame = pd.DataFrame(
        {c: [r.get(c) for r in records] for c in columns},
        dtype=object,
    )
    keep = pd.Series(True, index=frame.index)
    for f in active:
        keep &= f.mask(frame)
    return [record for record, hit in zip(records, keep.tolist()) if hit]


def filter_signature(filters: Iterable[RecordFilter]) -> str:
    """Stable text key of the active filters, used to spot filter changes."""
    parts = [
        f"{type(f).__name__}:{','.join(f.fields)}={f.describe()}"
        for f in filters
        if f.active
    ]
    return "|".join(parts)


def summarize_filters(filters: Iterable[RecordFilter]) -> str:
    """Filename-safe summary of the active filters."""
    parts = [slugify(f.describe()) for f in filters if f.active]
    return "_".join(p for p in parts if p)


def slugify(text: str, max_length: int = 60) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", str(text).casefold()).strip("-")
    return slug[:max_length].rstrip("-")


def unique_values(records: Iterable[Record], field: str) -> list:
    """Sorted distinct non-empty values of ``field`` for dropdown options."""
    seen = {}
    for record in records:
        value = record.get(field)
        if _is_blank(value) or isinstance(value, (list, dict)):
            continue
        seen.setdefault(value, None)
    return sorted(seen, key=lambda v: str(v).casefold())


def _sort_key(value):
    if isinstance(value, (int, float)):
        return (0, float(value), "")
    text = str(value).strip()
    try:
        return (0, float(text), "")
    except ValueError:
        pass
    ts = to_timestamp(text) if re.match(r"\d{4}-\d{2}-\d{2}", text) else None
    if ts is not None:
        return (1, ts.value, "")
    return (2, 0, text.casefold())


def sort_records(records: list[Record], field: str, descending: bool = False) -> list[Record]:
    """Stable sort by one field; records missing the field go last."""
    present = [r for r in records if not _is_blank(r.get(field))]
    missing = [r for r in records if _is_blank(r.get(field))]
    ordered = sorted(present, key=lambda r: _sort_key(r.get(field)), reverse=descending)
    return ordered + missing
