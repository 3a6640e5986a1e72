"""Default categories and locations inserted on first startup"""

from typing import Tuple

import structlog

from ..repositories.category_repository import CategoryRepository
from ..repositories.location_repository import LocationRepository
from ..schemas.news import CategoryInfo, LocationInfo

logger = structlog.get_logger(__name__)

DEFAULT_CATEGORIES = [
    ("technology", "Technology", "Tech industry, gadgets and software"),
    ("business", "Business", "Markets, companies and the economy"),
    ("sports", "Sports", "Scores, transfers and tournaments"),
    ("health", "Health", "Medicine, wellbeing and public health"),
    ("entertainment", "Entertainment", "Film, music and culture"),
    ("science", "Science", "Research and discoveries"),
    ("politics", "Politics", "Government and elections"),
    ("world", "World", "International news"),
]

DEFAULT_LOCATIONS = [
    ("United States", "USA", "America/New_York"),
    ("United Kingdom", "GBR", "Europe/London"),
    ("Canada", "CAN", "America/Toronto"),
    ("Australia", "AUS", "Australia/Sydney"),
    ("India", "IND", "Asia/Kolkata"),
    ("Germany", "DEU", "Europe/Berlin"),
    ("France", "FRA", "Europe/Paris"),
    ("Japan", "JPN", "Asia/Tokyo"),
]


def seed_reference_data(categories: CategoryRepository, locations: LocationRepository) -> Tuple[int, int]:
    """Insert missing defaults. Returns (categories added, locations added)."""
    added_categories = 0
    for name, display_name, description in DEFAULT_CATEGORIES:
        if categories.find_by_name(name, include_inactive=True) is None:
            categories.save(CategoryInfo(name=name, display_name=display_name, description=description))
            added_categories += 1

    added_locations = 0
    for name, country_code, timezone in DEFAULT_LOCATIONS:
        if locations.find_by_country_code(country_code, include_inactive=True) is None:
            locations.save(LocationInfo(name=name, country_code=country_code, timezone=timezone))
            added_locations += 1

    logger.info("Reference data seeded", categories_added=added_categories, locations_added=added_locations)
    return added_categories, added_locations
