import pytest

from app.models.sake import Sake
from conftest import as_user, collect_pages


@pytest.fixture
def many_sakes(db, breweries):
    for i in range(7):
        db.add(
            Sake(
                brewery_id=breweries["second"],
                name=f"大吟醸 {i}",
                category="清酒" if i % 2 else "その他",
                is_limited=i % 3 == 0,
                paid_tasting_price=1000 if i % 2 else None,
            )
        )
    db.commit()


class TestSakeDetail:
    def test_detail(self, client, seed_sake_id, alice):
        client.post(f"/api/sakes/{seed_sake_id}/reviews", json={"rating": 4, "tags": ["甘口"]}, headers=as_user(alice))

        body = client.get(f"/api/sakes/{seed_sake_id}").json()

        assert body["name"] == "山田 純米"
        assert body["brewery"]["name"] == "山田酒造"
        assert body["averageRating"] == pytest.approx(4.0)
        assert body["isCustom"] is False
        assert [r["rating"] for r in body["reviews"]] == [4]

    def test_not_found(self, client):
        assert client.get("/api/sakes/999").status_code == 404


class TestSakeEdit:
    def test_custom_sake_is_editable(self, client, breweries, alice, bob):
        sake_id = client.post(
            f"/api/breweries/{breweries['first']}/sakes", json={"name": "自作"}, headers=as_user(alice)
        ).json()["sakeId"]

        response = client.put(
            f"/api/sakes/{sake_id}",
            json={"name": "自作 改", "type": "生酒", "isLimited": True, "paidTastingPrice": 200, "category": "その他"},
            headers=as_user(bob),
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["name"], body["type"], body["isLimited"], body["paidTastingPrice"], body["category"]) == (
            "自作 改",
            "生酒",
            True,
            200,
            "その他",
        )
        assert body["addedBy"] == alice

    def test_seed_sake_is_not_editable(self, client, seed_sake_id, alice):
        response = client.put(f"/api/sakes/{seed_sake_id}", json={"name": "改名"}, headers=as_user(alice))

        assert response.status_code == 403
        assert client.get(f"/api/sakes/{seed_sake_id}").json()["name"] == "山田 純米"

    def test_requires_header(self, client, seed_sake_id):
        assert client.put(f"/api/sakes/{seed_sake_id}", json={"name": "x"}).status_code == 401


class TestSakeSearch:
    def test_all_sakes_in_id_order(self, client, breweries):
        body = client.get("/api/sakes").json()

        ids = [item["sakeId"] for item in body["items"]]
        assert ids == sorted(ids)
        assert len(ids) == 3
        assert body["nextCursor"] is None
        assert body["items"][0]["brewery"]["name"] == "山田酒造"

    def test_matches_sake_name(self, client, breweries):
        names = [i["name"] for i in client.get("/api/sakes", params={"q": "梅酒"}).json()["items"]]
        assert names == ["山田 梅酒"]

    def test_matches_brewery_name(self, client, breweries):
        names = [i["name"] for i in client.get("/api/sakes", params={"q": "川口"}).json()["items"]]
        assert names == ["川口 本醸造"]

    def test_substring_match_is_case_sensitive(self, client, db, breweries):
        db.add(Sake(brewery_id=breweries["first"], name="Junmai Daiginjo"))
        db.commit()

        assert len(client.get("/api/sakes", params={"q": "Junmai"}).json()["items"]) == 1
        assert client.get("/api/sakes", params={"q": "junmai"}).json()["items"] == []

    def test_like_wildcards_are_literal(self, client, breweries):
        assert client.get("/api/sakes", params={"q": "%"}).json()["items"] == []

    def test_flags(self, client, breweries):
        limited = client.get("/api/sakes", params={"isLimited": "true"}).json()["items"]
        paid = client.get("/api/sakes", params={"hasPaidTasting": "true"}).json()["items"]
        liqueur = client.get("/api/sakes", params={"category": "リキュール"}).json()["items"]

        assert [i["name"] for i in limited] == ["山田 梅酒"]
        assert [i["paidTastingPrice"] for i in paid] == [500]
        assert [i["name"] for i in liqueur] == ["山田 梅酒"]

    def test_invalid_category(self, client, breweries):
        assert client.get("/api/sakes", params={"category": "ビール"}).status_code == 400

    @pytest.mark.parametrize("limit", [0, -1, 101])
    def test_invalid_limit(self, client, breweries, limit):
        assert client.get("/api/sakes", params={"limit": limit}).status_code == 400

    def test_invalid_cursor(self, client, breweries):
        assert client.get("/api/sakes", params={"cursor": "not-a-cursor"}).status_code == 400

    @pytest.mark.parametrize("limit", [1, 2, 3, 10])
    def test_pages_cover_everything_once(self, client, many_sakes, limit):
        expected = [i["sakeId"] for i in client.get("/api/sakes", params={"limit": 100}).json()["items"]]

        paged = [i["sakeId"] for i in collect_pages(client, "/api/sakes", {}, limit)]

        assert paged == expected
        assert len(expected) == 10

    def test_pages_with_filters(self, client, many_sakes):
        params = {"q": "大吟醸", "hasPaidTasting": "true"}
        expected = [i["sakeId"] for i in client.get("/api/sakes", params=dict(params, limit=100)).json()["items"]]

        paged = [i["sakeId"] for i in collect_pages(client, "/api/sakes", params, 2)]

        assert paged == expected
        assert len(expected) == 3

    def test_next_cursor_only_when_more(self, client, breweries):
        assert client.get("/api/sakes", params={"limit": 3}).json()["nextCursor"] is None
        assert client.get("/api/sakes", params={"limit": 2}).json()["nextCursor"] is not None

    def test_insert_during_paging(self, client, many_sakes, breweries, alice):
        expected = [i["sakeId"] for i in client.get("/api/sakes", params={"limit": 100}).json()["items"]]
        first = client.get("/api/sakes", params={"limit": 4}).json()

        added = client.post(
            f"/api/breweries/{breweries['first']}/sakes", json={"name": "新作"}, headers=as_user(alice)
        ).json()["sakeId"]

        seen = [i["sakeId"] for i in first["items"]]
        cursor = first["nextCursor"]
        while cursor:
            page = client.get("/api/sakes", params={"limit": 4, "cursor": cursor}).json()
            seen.extend(i["sakeId"] for i in page["items"])
            cursor = page["nextCursor"]

        # new ids sort last, so the new sake only shows up at the end
        assert seen == expected + [added]
