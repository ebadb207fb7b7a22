"""Generic table state: raw list, filters, sort and page.

One ``TableView`` backs each table screen. Screens differ only in the
columns, filters and row actions they configure.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from coursedesk.filters import (
    Record,
    RecordFilter,
    apply_filters,
    filter_signature,
    sort_records,
    unique_values,
)
from coursedesk.pagination import Paginator, page_window


@dataclass(frozen=True)
class Column:
    """A rendered/exported column: a header plus a field name or a computed value."""

    header: str
    field: str | None = None
    compute: Callable[[Record], Any] | None = None
    default: Any = "-"

    def extract(self, record: Record) -> Any:
        if self.compute is not None:
            return self.compute(record)
        value = record.get(self.field) if self.field else None
        if value is None or value == "":
            return self.default
        return value


@dataclass(frozen=True)
class CancellationToken:
    """Tells a late response whether the view that asked for it still wants it."""

    view: "TableView"
    generation: int | None = None

    @property
    def cancelled(self) -> bool:
        if self.view.closed:
            return True
        return self.generation is not None and self.generation != self.view.generation


class TableView:
    def __init__(
        self,
        name: str,
        key_field: str,
        *,
        page_size: int = 10,
        retain_page_on_filter: bool = False,
        sort_field: str | None = None,
        sort_descending: bool = False,
    ):
        self.name = name
        self.key_field = key_field
        self.records: list[Record] = []
        self.filtered: list[Record] = []
        self.filters: list[RecordFilter] = []
        self.paginator = Paginator(page_size=page_size)
        self.retain_page_on_filter = retain_page_on_filter
        self.sort_field = sort_field
        self.sort_descending = sort_descending
        self.loading = False
        self.loaded = False
        self.generation = 0
        self.closed = False
        self._signature = ""

    # --- lifecycle ---

    def begin_load(self) -> CancellationToken:
        """Start a new load; responses to older loads become stale."""
        self.generation += 1
        return CancellationToken(self, self.generation)

    def finish_load(self, token: CancellationToken, records: list[Record]) -> bool:
        if token.cancelled:
            return False
        self.records = list(records)
        self.loaded = True
        self.refresh()
        return True

    def load(self, records: list[Record]) -> None:
        """Replace the raw list wholesale."""
        self.finish_load(self.begin_load(), records)

    def lifetime_token(self) -> CancellationToken:
        return CancellationToken(self)

    def close(self) -> None:
        self.closed = True

    # --- filtering / sorting ---

    def refresh(self) -> None:
        filtered = apply_filters(self.records, self.filters)
        if self.sort_field:
            filtered = sort_records(filtered, self.sort_field, self.sort_descending)
        self.filtered = filtered
        self.paginator.clamp(len(self.filtered))

    def set_filters(self, filters: Iterable[RecordFilter]) -> bool:
        """Apply a new filter set. Returns True when the active filters changed."""
        self.filters = list(filters)
        signature = filter_signature(self.filters)
        changed = signature != self._signature
        self._signature = signature
        if changed and not self.retain_page_on_filter:
            self.paginator.current_page = 1
        self.refresh()
        return changed

    def clear_filters(self) -> bool:
        return self.set_filters([])

    def set_sort(self, field: str | None, descending: bool = False) -> None:
        self.sort_field = field
        self.sort_descending = descending
        self.refresh()

    def options(self, field: str) -> list:
        return unique_values(self.records, field)

    # --- paging ---

    @property
    def total_pages(self) -> int:
        return self.paginator.total_pages(len(self.filtered))

    @property
    def current_page(self) -> int:
        return self.paginator.current_page

    def page_records(self) -> list[Record]:
        return self.paginator.page_slice(self.filtered)

    def go_to(self, page: int) -> bool:
        return self.paginator.go_to(page, len(self.filtered))

    def next_page(self) -> bool:
        return self.paginator.next(len(self.filtered))

    def previous_page(self) -> bool:
        return self.paginator.previous(len(self.filtered))

    def first_page(self) -> bool:
        return self.paginator.first(len(self.filtered))

    def last_page(self) -> bool:
        return self.paginator.last(len(self.filtered))

    def set_page_size(self, page_size: int) -> None:
        self.paginator.set_page_size(page_size)

    def page_buttons(self, width: int = 5) -> list[int | None]:
        return page_window(self.current_page, self.total_pages, width)

    def showing(self) -> tuple[int, int]:
        return self.paginator.showing(len(self.filtered))

    # --- row edits ---

    def find(self, key: Any) -> Record | None:
        for record in self.records:
            if record.get(self.key_field) == key:
                return record
        return None

    def patch(self, key: Any, changes: dict[str, Any]) -> bool:
        """
        Update one row in place. The filtered list shares the same dict,
        so the edit survives re-filtering.
        """
        record = self.find(key)
        if record is None:
            return False
        record.update(changes)
        return True

    def update_field(self, key: Any, field: str, value: Any) -> bool:
        return self.patch(key, {field: value})
