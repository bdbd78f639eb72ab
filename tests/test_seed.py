import json
from pathlib import Path

from app.models.brewery import Brewery
from app.models.sake import Sake
from app.seed import insert_breweries

DOCUMENT = {
    "breweries": [
        {
            "name": "北山酒造",
            "mapPositionX": 12.5,
            "mapPositionY": 40,
            "area": "東",
            "sakes": [
                {"name": "北山 純米吟醸", "type": "純米吟醸"},
                {"name": "北山 柚子酒", "category": "リキュール", "isLimited": True, "paidTastingPrice": 300},
                {"name": "北山 謎", "category": "ワイン", "paidTastingPrice": -5},
            ],
        },
        {"name": "南川酒造"},
    ]
}


def test_insert_breweries(db):
    assert insert_breweries(db, DOCUMENT) == 3

    north = db.query(Brewery).filter(Brewery.name == "北山酒造").one()
    assert (north.map_position_x, north.map_position_y, north.area) == (12.5, 40.0, "東")
    assert db.query(Brewery).count() == 2

    sakes = {s.name: s for s in db.query(Sake).all()}
    assert sakes["北山 純米吟醸"].category == "清酒"
    assert sakes["北山 柚子酒"].is_limited
    assert sakes["北山 柚子酒"].paid_tasting_price == 300
    assert sakes["北山 謎"].category == "清酒"
    assert sakes["北山 謎"].paid_tasting_price is None
    assert not any(s.is_custom for s in sakes.values())


def test_sample_file_loads(db):
    path = Path(__file__).resolve().parent.parent / "data" / "seed.example.json"
    with path.open(encoding="utf-8") as f:
        document = json.load(f)

    assert insert_breweries(db, document) > 0


def test_seed_sakes_are_not_editable(client, db, alice):
    insert_breweries(db, DOCUMENT)
    sake = db.query(Sake).first()

    response = client.put(f"/api/sakes/{sake.id}", json={"name": "renamed"}, headers={"X-User-Id": alice})

    assert response.status_code == 403
