import json

import pytest

from app.client.api import ApiError, SakeReviewClient
from app.client.bookmarks import BookmarkList
from app.client.feed import InfiniteFeed
from app.client.identity import USER_ID_KEY, USER_NAME_KEY, IdentityStore, LocalIdentity
from app.client.tags import toggle_tag


class TestToggleTag:
    def test_plain_add_and_remove(self):
        assert toggle_tag([], "旨味") == ["旨味"]
        assert toggle_tag(["旨味", "熟成"], "旨味") == ["熟成"]

    def test_exclusive_pair_replaces_mate(self):
        assert toggle_tag(["甘口", "旨味"], "辛口") == ["旨味", "辛口"]
        assert toggle_tag(["淡麗"], "濃醇") == ["濃醇"]

    def test_pairs_are_independent(self):
        assert toggle_tag(["甘口"], "濃醇") == ["甘口", "濃醇"]

    def test_input_is_not_modified(self):
        selected = ["甘口"]
        toggle_tag(selected, "辛口")
        assert selected == ["甘口"]


class TestIdentityStore:
    def test_save_load_clear(self, tmp_path):
        store = IdentityStore(str(tmp_path / "id" / "identity.json"))
        assert store.load() is None
        assert not store.is_authenticated()

        store.save(LocalIdentity(user_id="abc123", user_name="さくら"))

        assert store.load() == LocalIdentity(user_id="abc123", user_name="さくら")
        store.clear()
        assert store.load() is None
        store.clear()

    def test_half_written_identity_is_signed_out(self, tmp_path):
        path = tmp_path / "identity.json"
        path.write_text(json.dumps({USER_ID_KEY: "abc123"}), encoding="utf-8")

        assert IdentityStore(str(path)).load() is None

    def test_corrupt_file_is_signed_out(self, tmp_path):
        path = tmp_path / "identity.json"
        path.write_text("{not json", encoding="utf-8")

        assert not IdentityStore(str(path)).is_authenticated()

    def test_file_keys(self, tmp_path):
        path = tmp_path / "identity.json"
        IdentityStore(str(path)).save(LocalIdentity(user_id="u1", user_name="Alice"))

        assert json.loads(path.read_text(encoding="utf-8")) == {USER_ID_KEY: "u1", USER_NAME_KEY: "Alice"}


class TestApiClient:
    def test_register_then_post(self, client, seed_sake_id):
        api = SakeReviewClient(client)

        identity = api.register("Alice")
        review = api.create_review(seed_sake_id, 4, tags=["甘口"])

        assert review["userId"] == identity.user_id
        assert api.get_sake(seed_sake_id)["averageRating"] == pytest.approx(4.0)
        assert api.get_reviews(tags=["甘口"])["items"][0]["reviewId"] == review["reviewId"]

    def test_errors_carry_status_and_detail(self, client, seed_sake_id):
        api = SakeReviewClient(client)

        with pytest.raises(ApiError) as excinfo:
            api.create_review(seed_sake_id, 4)

        assert excinfo.value.status == 401
        assert excinfo.value.message

    def test_search_flags(self, client, breweries):
        api = SakeReviewClient(client)

        items = api.search_sakes(is_limited=True)["items"]

        assert [s["name"] for s in items] == ["山田 梅酒"]
        assert len(api.search_sakes()["items"]) == 3

    def test_bookmarks_and_timeline(self, client, seed_sake_id, breweries):
        api = SakeReviewClient(client)
        api.register("Alice")

        api.add_bookmark(seed_sake_id)
        api.create_brewery_note(breweries["first"], "試飲の列が長い")

        assert [b["sake"]["sakeId"] for b in api.get_bookmarks()] == [seed_sake_id]
        assert api.get_timeline()["items"][0]["type"] == "brewery_note"
        api.remove_bookmark(seed_sake_id)
        assert api.get_bookmarks() == []


def bookmark_row(sake_id, brewery_id=1):
    return {"sake": {"sakeId": sake_id}, "brewery": {"breweryId": brewery_id}}


class FakeBookmarkApi:
    def __init__(self, rows, fail_remove=False):
        self.rows = list(rows)
        self.fail_remove = fail_remove

    def get_bookmarks(self):
        return list(self.rows)

    def add_bookmark(self, sake_id):
        self.rows.append(bookmark_row(sake_id, brewery_id=2))
        return {"bookmarkId": len(self.rows), "sakeId": sake_id}

    def remove_bookmark(self, sake_id):
        if self.fail_remove:
            raise ApiError(500, "Internal server error")
        self.rows = [r for r in self.rows if r["sake"]["sakeId"] != sake_id]


class TestBookmarkList:
    def test_toggle_on_reloads(self):
        bookmarks = BookmarkList(FakeBookmarkApi([bookmark_row(1)]))
        bookmarks.load()

        assert bookmarks.toggle(5) is True
        assert bookmarks.sake_ids == {1, 5}
        assert bookmarks.brewery_ids == {1, 2}

    def test_toggle_off(self):
        bookmarks = BookmarkList(FakeBookmarkApi([bookmark_row(1), bookmark_row(2)]))
        bookmarks.load()

        assert bookmarks.toggle(1) is False
        assert not bookmarks.is_bookmarked(1)

    def test_failed_removal_rolls_back(self):
        bookmarks = BookmarkList(FakeBookmarkApi([bookmark_row(1), bookmark_row(2)], fail_remove=True))
        before = bookmarks.load()

        with pytest.raises(ApiError):
            bookmarks.toggle(1)

        assert bookmarks.bookmarks == before


class TestInfiniteFeed:
    def test_reads_until_end(self):
        pages = {None: {"items": [1, 2], "nextCursor": "a"}, "a": {"items": [3], "nextCursor": None}}
        feed = InfiniteFeed(lambda cursor: pages[cursor])

        assert feed.load_more()
        assert feed.load_more()
        assert not feed.load_more()
        assert feed.items == [1, 2, 3]
        assert feed.has_reached_end

    def test_overlapping_trigger_is_ignored(self):
        calls = []

        def fetch(cursor):
            calls.append(cursor)
            assert feed.load_more() is False
            return {"items": [1], "nextCursor": "next"}

        feed = InfiniteFeed(fetch)
        feed.load_more()

        assert calls == [None]
        assert not feed.is_loading

    def test_error_then_retry(self):
        attempts = []

        def fetch(cursor):
            attempts.append(cursor)
            if len(attempts) == 1:
                raise ApiError(500, "Internal server error")
            return {"items": ["x"], "nextCursor": None}

        feed = InfiniteFeed(fetch)

        assert feed.load_more() is False
        assert isinstance(feed.error, ApiError)
        assert feed.load_more() is True
        assert feed.error is None
        assert feed.items == ["x"]
        assert attempts == [None, None]

    def test_refresh_starts_over(self):
        feed = InfiniteFeed(lambda cursor: {"items": [cursor or "first"], "nextCursor": None})
        feed.load_more()

        feed.refresh()

        assert feed.items == ["first"]
        assert feed.pages_loaded == 1

    def test_against_timeline(self, client, db, seed_sake_id, alice):
        api = SakeReviewClient(client)
        api.identity = LocalIdentity(user_id=alice, user_name="Alice")
        for rating in range(1, 6):
            api.create_review(seed_sake_id, rating)

        feed = InfiniteFeed(lambda cursor: api.get_timeline(cursor=cursor, limit=2))
        while feed.load_more():
            pass

        assert sorted(i["rating"] for i in feed.items) == [1, 2, 3, 4, 5]
        assert feed.pages_loaded == 3
