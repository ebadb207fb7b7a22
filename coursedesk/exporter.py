import io
import logging
from collections.abc import Iterable
from datetime import date

import pandas as pd

from coursedesk.filters import Record, RecordFilter, slugify, summarize_filters
from coursedesk.table_view import Column

logger = logging.getLogger(__name__)


def build_frame(records: Iterable[Record], columns: list[Column]) -> pd.DataFrame:
    """One row per record, human-readable headers, computed columns filled in now."""
    headers = [c.header for c in columns]
    rows = [[c.extract(r) for c in columns] for r in records]
    return pd.DataFrame(rows, columns=headers)


def export_filename(
    dataset: str,
    filters: Iterable[RecordFilter] = (),
    today: date | None = None,
    extension: str = "xlsx",
) -> str:
    """e.g. orders_data-science_2025-01-31.xlsx"""
    today = today or date.today()
    parts = [slugify(dataset) or "export"]
    summary = summarize_filters(filters)
    if summary:
        parts.append(summary)
    parts.append(today.strftime("%Y-%m-%d"))
    return f"{'_'.join(parts)}.{extension}"


class Exporter:
    """Builds spreadsheet bytes; ``busy`` is True only while a file is being built."""

    def __init__(self):
        self.busy = False

    def to_excel(self, records: Iterable[Record], columns: list[Column], sheet_name: str = "Export") -> bytes:
        self.busy = True
        try:
            frame = build_frame(records, columns)
            buffer = io.BytesIO()
            with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
                frame.to_excel(writer, sheet_name=(sheet_name or "Export")[:31], index=False)
            buffer.seek(0)
            logger.info("Exported %d rows to sheet %s", len(frame), sheet_name)
            return buffer.getvalue()
        finally:
            self.busy = False

    def to_csv(self, records: Iterable[Record], columns: list[Column]) -> bytes:
        self.busy = True
        try:
            return build_frame(records, columns).to_csv(index=False).encode("utf-8")
        finally:
            self.busy = False
