from typing import List, Set

from app.client.api import SakeReviewClient
from app.logger import get_logger

logger = get_logger("client.bookmarks")


class BookmarkList:
    """Local copy of the caller's bookmarks with an optimistic toggle."""

    def __init__(self, api: SakeReviewClient):
        self.api = api
        self.bookmarks: List[dict] = []

    def load(self) -> List[dict]:
        self.bookmarks = self.api.get_bookmarks()
        return self.bookmarks

    @property
    def sake_ids(self) -> Set[int]:
        return {b["sake"]["sakeId"] for b in self.bookmarks}

    @property
    def brewery_ids(self) -> Set[int]:
        return {b["brewery"]["breweryId"] for b in self.bookmarks}

    def is_bookmarked(self, sake_id: int) -> bool:
        return sake_id in self.sake_ids

    def toggle(self, sake_id: int) -> bool:
        """Flip the bookmark on ``sake_id``; returns the new state.

        Removal is applied locally first and restored if the request fails.
        Adding waits for the server and then reloads the list, since the add
        response lacks the sake and brewery fields the list shows.
        """
        if self.is_bookmarked(sake_id):
            snapshot = list(self.bookmarks)
            self.bookmarks = [b for b in self.bookmarks if b["sake"]["sakeId"] != sake_id]
            try:
                self.api.remove_bookmark(sake_id)
            except Exception:
                logger.warning(f"Removing bookmark on sake {sake_id} failed, rolling back")
                self.bookmarks = snapshot
                raise
            return False

        self.api.add_bookmark(sake_id)
        self.load()
        return True
