"""Grocery store lookup models and distance helpers."""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0
MILES_PER_KM = 0.621371
FEET_PER_MILE = 5280

MAJOR_CHAINS = (
    "safeway",
    "kroger",
    "whole foods",
    "trader joe",
    "albertsons",
    "fred meyer",
    "walmart",
    "target",
    "costco",
    "sam's club",
    "publix",
    "aldi",
    "food lion",
    "giant eagle",
    "stop & shop",
    "meijer",
    "harris teeter",
    "ralph",
    "vons",
    "jewel-osco",
    "wegmans",
    "sprouts",
    "save mart",
    "food 4 less",
    "winco",
    "market basket",
    "qfc",
    "h-e-b",
    "smiths",
    "piggly wiggly",
    "ingles",
)
GROCERY_KEYWORDS = ("supermarket", "grocery", "foods")
EXCLUDED_KEYWORDS = ("mini", "convenience", "quick")


@dataclass(frozen=True)
class PlacePrediction:
    """A ranked free-text place search result."""

    place_id: str
    description: str
    main_text: str
    secondary_text: str


@dataclass(frozen=True)
class GroceryStore:
    """A nearby grocery store candidate."""

    id: str
    name: str
    address: str
    lat: float
    lng: float
    distance_miles: float
    distance: str


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two coordinates in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * MILES_PER_KM


def format_distance(miles: float) -> str:
    """Format a distance as feet under 0.1 mi, otherwise miles."""
    if miles < 0.1:
        return f"{round(miles * FEET_PER_MILE)} ft"
    return f"{miles:.1f} mi"


def is_grocery_store(name: str) -> bool:
    """Return True for known chains or grocery-like names that aren't minimarts."""
    lowered = name.lower()
    if any(chain in lowered for chain in MAJOR_CHAINS):
        return True
    return any(word in lowered for word in GROCERY_KEYWORDS) and not any(
        word in lowered for word in EXCLUDED_KEYWORDS
    )
