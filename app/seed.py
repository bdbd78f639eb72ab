"""Load the festival's breweries and their listed sakes.

Usage: python -m app.seed breweries.json [--reset]
"""
import argparse
import json
import logging
import os

from sqlalchemy.orm import Session

from app.constants import DEFAULT_CATEGORY, SAKE_CATEGORIES
from app.database import Base, SessionLocal, engine
from app.models import user  # noqa: F401
from app.models.brewery import Brewery
from app.models.sake import Sake


def setup_database(reset: bool = False):
    if reset:
        logging.info("Dropping and recreating all tables...")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def insert_breweries(db: Session, document: dict) -> int:
    """Insert breweries and their seed sakes. Returns the number of sakes added."""
    sake_count = 0
    for entry in document.get("breweries", []):
        brewery = Brewery(
            name=entry["name"],
            map_position_x=float(entry.get("mapPositionX", 0)),
            map_position_y=float(entry.get("mapPositionY", 0)),
            area=entry.get("area"),
        )
        db.add(brewery)
        db.flush()

        for item in entry.get("sakes", []):
            category = item.get("category") or DEFAULT_CATEGORY
            if category not in SAKE_CATEGORIES:
                logging.warning(f"Unknown category '{category}' for '{item['name']}', using {DEFAULT_CATEGORY}")
                category = DEFAULT_CATEGORY

            price = item.get("paidTastingPrice")
            if price is not None and (not isinstance(price, int) or price <= 0):
                logging.warning(f"Ignoring invalid paid tasting price {price!r} for '{item['name']}'")
                price = None

            db.add(
                Sake(
                    brewery_id=brewery.id,
                    name=item["name"],
                    type=item.get("type"),
                    category=category,
                    is_limited=bool(item.get("isLimited", False)),
                    paid_tasting_price=price,
                    is_custom=False,
                )
            )
            sake_count += 1

    db.commit()
    return sake_count


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    parser = argparse.ArgumentParser(description="Load brewery seed data")
    parser.add_argument("path", help="JSON file with a top-level 'breweries' list")
    parser.add_argument("--reset", action="store_true", help="drop all tables first")
    args = parser.parse_args(argv)

    if not os.path.exists(args.path):
        parser.error(f"'{args.path}' does not exist")

    with open(args.path, encoding="utf-8") as f:
        document = json.load(f)

    setup_database(reset=args.reset)
    db = SessionLocal()
    try:
        sakes = insert_breweries(db, document)
    finally:
        db.close()
    logging.info(f"Loaded {len(document.get('breweries', []))} breweries and {sakes} sakes")


if __name__ == "__main__":
    main()
