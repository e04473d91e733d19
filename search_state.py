"""Search, filter and pagination state for the publications browser."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from models import SORT_KEYS, SORT_ORDERS, PublicationQuery, PublicationsResponse

PAGE_SIZE = 15
DEBOUNCE_SECONDS = 0.3
MAX_VISIBLE_PAGES = 5
FILTER_TAGS: tuple[str, ...] = (
    "Human Physiology",
    "Plant Biology",
    "Microbiology",
    "Cell Biology",
    "Microgravity",
    "Space Radiation",
)

IDLE = "idle"
DEBOUNCING = "debouncing"
FETCHING = "fetching"
SUCCESS = "success"
ERROR = "error"

LOGGER = logging.getLogger(__name__)


def total_pages_for(total: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total / page_size) if total > 0 else 0


def offset_for(page: int, page_size: int = PAGE_SIZE) -> int:
    return (page - 1) * page_size


class SearchState:
    """Debounced free-text search plus filters, sorting and pagination.

    Keystrokes go through :meth:`type_query`; :meth:`tick` commits the text
    once it has been quiet for ``debounce_seconds`` and fetches. Every change
    to the committed query or to a filter resets the page to 1 and fetches.

    Args:
        fetch: Loads one page, normally ``BioscienceQueries.publications``.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        fetch: Callable[[PublicationQuery], PublicationsResponse],
        clock: Callable[[], float] = time.monotonic,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ) -> None:
        self._fetch = fetch
        self._clock = clock
        self.debounce_seconds = debounce_seconds

        self.state = IDLE
        self.search_text = ""
        self.debounced_query = ""
        self.current_page = 1
        self.sort_by = "relevance"
        self.sort_order = "desc"
        self.year_from: int | None = None
        self.year_to: int | None = None
        self.selected_tags: list[str] = []

        self.result: PublicationsResponse | None = None
        self.error: Exception | None = None
        self._last_keystroke: float | None = None

    # -- free text ----------------------------------------------------------

    def type_query(self, text: str) -> None:
        self.search_text = text
        self._last_keystroke = self._clock()
        self.state = DEBOUNCING

    def tick(self) -> bool:
        """Commit the typed text if the quiet period has passed. Returns True if it did."""
        if self._last_keystroke is None:
            return False
        if self._clock() - self._last_keystroke < self.debounce_seconds:
            return False

        self._last_keystroke = None
        self.debounced_query = self.search_text
        self._filters_changed()
        return True

    # -- filters ------------------------------------------------------------

    def set_sort(self, sort_by: str, sort_order: str | None = None) -> None:
        if sort_by not in SORT_KEYS:
            raise ValueError(f"Unsupported sort key: {sort_by!r}")
        if sort_order is not None and sort_order not in SORT_ORDERS:
            raise ValueError(f"Unsupported sort order: {sort_order!r}")
        self.sort_by = sort_by
        if sort_order is not None:
            self.sort_order = sort_order
        self._filters_changed()

    def set_year_range(self, year_from: int | None, year_to: int | None) -> None:
        self.year_from = year_from or None
        self.year_to = year_to or None
        self._filters_changed()

    def toggle_tag(self, tag: str) -> None:
        if tag in self.selected_tags:
            self.selected_tags = [t for t in self.selected_tags if t != tag]
        else:
            self.selected_tags = [*self.selected_tags, tag]
        self._filters_changed()

    def clear_tags(self) -> None:
        self.selected_tags = []
        self._filters_changed()

    def _filters_changed(self) -> None:
        self.current_page = 1
        self.refresh()

    # -- pagination ---------------------------------------------------------

    @property
    def total(self) -> int:
        return self.result.total if self.result is not None else 0

    @property
    def total_pages(self) -> int:
        return total_pages_for(self.total)

    def go_to_page(self, page: int) -> None:
        """Move to ``page`` clamped into [1, total_pages]."""
        target = max(1, min(page, max(self.total_pages, 1)))
        if target == self.current_page:
            return
        self.current_page = target
        self.refresh()

    def next_page(self) -> None:
        self.go_to_page(self.current_page + 1)

    def prev_page(self) -> None:
        self.go_to_page(self.current_page - 1)

    def page_numbers(self) -> list[int | str]:
        """Page links to show, with ``"..."`` where pages are skipped."""
        total_pages = self.total_pages
        if total_pages <= MAX_VISIBLE_PAGES:
            return list(range(1, total_pages + 1))

        start = max(1, self.current_page - 2)
        end = min(total_pages, start + MAX_VISIBLE_PAGES - 1)
        pages: list[int | str] = []
        if start > 1:
            pages.append(1)
            if start > 2:
                pages.append("...")
        pages.extend(range(start, end + 1))
        if end < total_pages:
            if end < total_pages - 1:
                pages.append("...")
            pages.append(total_pages)
        return pages

    # -- fetching -----------------------------------------------------------

    def query(self) -> PublicationQuery:
        return PublicationQuery(
            search=self.debounced_query or None,
            limit=PAGE_SIZE,
            offset=offset_for(self.current_page),
            sort_by=self.sort_by,
            sort_order=self.sort_order,
            year_from=self.year_from,
            year_to=self.year_to,
            tags=tuple(self.selected_tags),
        )

    def refresh(self) -> PublicationsResponse | None:
        query = self.query()
        self.state = FETCHING
        try:
            self.result = self._fetch(query)
        except Exception as exc:
            self.result = None
            self.error = exc
            self.state = ERROR
            LOGGER.warning("Publication search failed: %s", exc)
        else:
            self.error = None
            self.state = SUCCESS
            LOGGER.info(
                "Search query=%r page=%s total=%s",
                query.search,
                self.current_page,
                self.result.total,
            )

        if self._last_keystroke is not None:
            self.state = DEBOUNCING
        return self.result
