"""Page arithmetic for the dashboard tables."""

import math
from dataclasses import dataclass
from typing import Sequence, TypeVar

T = TypeVar("T")


def page_count(total_items: int, page_size: int) -> int:
    """ceil(total_items / page_size); 0 for an empty list."""
    return math.ceil(max(total_items, 0) / page_size)


@dataclass
class Paginator:
    page_size: int = 10
    current_page: int = 1

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")

    def total_pages(self, total_items: int) -> int:
        """Page count for display: an empty list still shows one empty page."""
        return max(1, page_count(total_items, self.page_size))

    def clamp(self, total_items: int) -> int:
        self.current_page = max(1, min(self.current_page, self.total_pages(total_items)))
        return self.current_page

    def go_to(self, page: int, total_items: int) -> bool:
        """Jump to ``page``; out-of-range targets leave the page unchanged."""
        if 1 <= page <= self.total_pages(total_items):
            self.current_page = page
            return True
        return False

    def first(self, total_items: int) -> bool:
        return self.go_to(1, total_items)

    def previous(self, total_items: int) -> bool:
        return self.go_to(self.current_page - 1, total_items)

    def next(self, total_items: int) -> bool:
        return self.go_to(self.current_page + 1, total_items)

    def last(self, total_items: int) -> bool:
        return self.go_to(self.total_pages(total_items), total_items)

    def has_previous(self) -> bool:
        return self.current_page > 1

    def has_next(self, total_items: int) -> bool:
        return self.current_page < self.total_pages(total_items)

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self.current_page = 1

    def page_slice(self, items: Sequence[T]) -> list[T]:
        self.clamp(len(items))
        start = (self.current_page - 1) * self.page_size
        return list(items[start:start + self.page_size])

    def showing(self, total_items: int) -> tuple[int, int]:
        """1-based (first, last) row numbers on the current page; (0, 0) when empty."""
        if total_items <= 0:
            return 0, 0
        start = (self.current_page - 1) * self.page_size
        return start + 1, min(start + self.page_size, total_items)


def page_window(current_page: int, total_pages: int, width: int = 5) -> list[int | None]:
    """
    Page buttons to render: a sliding window of ``width`` pages around the
    current one, plus first/last anchors. ``None`` marks an ellipsis gap.
    """
    total_pages = max(total_pages, 1)
    if total_pages <= width + 2:
        return list(range(1, total_pages + 1))

    current_page = max(1, min(current_page, total_pages))
    start = max(1, current_page - width // 2)
    end = start + width - 1
    if end > total_pages:
        end = total_pages
        start = total_pages - width + 1

    pages: list[int | None] = []
    if start > 1:
        pages.append(1)
        if start > 2:
            pages.append(None)
    pages.extend(range(start, end + 1))
    if end < total_pages:
        if end < total_pages - 1:
            pages.append(None)
        pages.append(total_pages)
    return pages
