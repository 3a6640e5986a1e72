"""
Lookup tables between the local vocabulary and the news provider's.
"""

from typing import Optional

# Provider categories: business, entertainment, general, health, science, sports, technology.
# Anything else (politics, world, ...) goes out without a category hint.
PROVIDER_CATEGORIES = {
    "technology": "technology",
    "sports": "sports",
    "business": "business",
    "health": "health",
    "entertainment": "entertainment",
    "science": "science",
}

# ISO 3166-1 alpha-3 -> alpha-2 for the locations we expect to see
ALPHA3_TO_ALPHA2 = {
    "USA": "us",
    "GBR": "gb",
    "CAN": "ca",
    "AUS": "au",
    "IND": "in",
    "DEU": "de",
    "FRA": "fr",
    "JPN": "jp",
    "BRA": "br",
    "CHN": "cn",
}


def map_category_name(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    return PROVIDER_CATEGORIES.get(name.strip().lower())


def map_country_code(code: Optional[str]) -> Optional[str]:
    """
    Two-letter lowercase provider code for a stored country code.

    >>> map_country_code("USA"), map_country_code("us"), map_country_code("XYZ")
    ('us', 'us', 'xy')
    """
    if not code:
        return None
    code = code.strip()
    if len(code) == 3:
        return ALPHA3_TO_ALPHA2.get(code.upper(), code[:2].lower())
    if len(code) == 2:
        return code.lower()
    return None
