"""Incremental reveal ("show more") over a filtered, sorted appointment list"""

from typing import Optional, Sequence

from ...config import PAGE_SIZE


class RevealWindow:
    """
    Tracks how many results are shown.

    The count starts at one page, grows by one page per show_more(), and
    falls back to one page whenever the status filter, priority filter or
    search query changes.
    """

    def __init__(self, page_size: int = PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self.count = page_size
        self._state: Optional[tuple] = None

    def sync(self, status_filter, priority_filter, query) -> bool:
        """Record the current filter identity; returns True if the window was reset"""
        state = (
            getattr(status_filter, "value", status_filter),
            getattr(priority_filter, "value", priority_filter),
            query or "",
        )
        if state == self._state:
            return False
        self._state = state
        self.count = self.page_size
        return True

    def show_more(self) -> int:
        self.count += self.page_size
        return self.count

    def visible(self, results: Sequence) -> list:
        return list(results[: self.count])

    def remaining(self, results: Sequence) -> int:
        return max(0, len(results) - self.count)

    def has_more(self, results: Sequence) -> bool:
        return len(results) > self.count
