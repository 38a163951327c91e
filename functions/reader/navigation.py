"""
Page navigation state for one open document.
"""

from __future__ import annotations

from typing import Callable

PageListener = Callable[[int, int], None]


class PageNavigator:
    """Current page of one document, always clamped to [1, total_pages].

    ``total_pages`` is 0 until the document reports its page count; until
    then only the lower bound applies. Listeners receive ``(new, old)`` after
    every change that actually moves the page.
    """

    def __init__(self, total_pages: int = 0, current_page: int = 1):
        if total_pages < 0:
            raise ValueError("total_pages must be >= 0")
        self._total_pages = total_pages
        self._listeners: list[PageListener] = []
        self._current_page = self.clamp(current_page)

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        return self._total_pages

    @property
    def is_loaded(self) -> bool:
        return self._total_pages > 0

    @property
    def percent(self) -> float:
        if not self._total_pages:
            return 0.0
        return self._current_page / self._total_pages * 100

    @property
    def can_go_next(self) -> bool:
        return self.is_loaded and self._current_page < self._total_pages

    @property
    def can_go_previous(self) -> bool:
        return self._current_page > 1

    def subscribe(self, listener: PageListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def clamp(self, page: int) -> int:
        page = max(int(page), 1)
        if self._total_pages:
            page = min(page, self._total_pages)
        return page

    def set_total_pages(self, total_pages: int) -> bool:
        """Record the page count reported by the document.

        Returns True if the current page had to be pulled back into range.
        """
        if total_pages < 1:
            raise ValueError("total_pages must be >= 1")
        self._total_pages = total_pages
        return self._move(self._current_page)

    def go_to_next(self) -> bool:
        if not self.can_go_next:
            return False
        return self._move(self._current_page + 1)

    def go_to_previous(self) -> bool:
        if not self.can_go_previous:
            return False
        return self._move(self._current_page - 1)

    def jump_to(self, page: int) -> bool:
        return self._move(page)

    def _move(self, page: int) -> bool:
        target = self.clamp(page)
        if target == self._current_page:
            return False
        previous = self._current_page
        self._current_page = target
        for listener in list(self._listeners):
            listener(target, previous)
        return True
