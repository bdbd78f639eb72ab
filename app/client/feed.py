from typing import Callable, List, Optional

# fetch_page(cursor) -> {"items": [...], "nextCursor": str | None}
PageFetcher = Callable[[Optional[str]], dict]


class InfiniteFeed:
    """Accumulates cursor pages for infinite scrolling.

    ``load_more`` is a no-op while a page is in flight or once the stream has
    ended, so overlapping scroll triggers never request the same page twice.
    """

    def __init__(self, fetch_page: PageFetcher):
        self.fetch_page = fetch_page
        self.items: List[dict] = []
        self.next_cursor: Optional[str] = None
        self.has_reached_end = False
        self.is_loading = False
        self.pages_loaded = 0
        self.error: Optional[Exception] = None

    def load_more(self) -> bool:
        """Fetch the next page. Returns False when nothing was requested."""
        if self.is_loading or self.has_reached_end:
            return False

        self.is_loading = True
        self.error = None
        try:
            page = self.fetch_page(self.next_cursor if self.pages_loaded else None)
        except Exception as e:
            # shown inline; calling load_more again retries the same page
            self.error = e
            return False
        finally:
            self.is_loading = False

        self.items.extend(page["items"])
        self.next_cursor = page.get("nextCursor")
        self.pages_loaded += 1
        self.has_reached_end = self.next_cursor is None
        return True

    def refresh(self) -> bool:
        self.items = []
        self.next_cursor = None
        self.has_reached_end = False
        self.pages_loaded = 0
        return self.load_more()
