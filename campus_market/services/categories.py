from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_market.models.listing import Category
from campus_market.utils.logger import logger

# (name, description, icon)
SEED_CATEGORIES = [
    ("Textbooks", "Academic textbooks and study materials", "book"),
    ("Electronics", "Phones, laptops, tablets, and accessories", "devices"),
    ("Furniture", "Dorm and apartment furniture", "chair"),
    ("Clothing", "Clothes, shoes, and accessories", "checkroom"),
    ("Sports", "Sports equipment and gear", "sports_soccer"),
    ("Tickets", "Event and game tickets", "confirmation_number"),
    ("Transportation", "Bikes, scooters, and car accessories", "directions_bike"),
    ("Services", "Tutoring, moving help, etc.", "handyman"),
    ("Housing", "Sublease and roommate listings", "home"),
    ("Other", "Everything else", "category"),
]


def seed_categories(db: Session) -> int:
    """Insert any missing seed categories. Safe to run on every startup."""
    existing = set(db.scalars(select(Category.name)).all())
    added = 0
    for name, description, icon in SEED_CATEGORIES:
        if name in existing:
            continue
        db.add(Category(name=name, description=description, icon=icon))
        added += 1
    db.commit()
    if added:
        logger.info("seeded %d categories", added)
    return added


def list_categories(db: Session) -> List[Category]:
    return list(db.scalars(select(Category).order_by(Category.id)).all())
