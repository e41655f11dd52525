"""Aggregation pipelines and geo filters for tour analytics.

Each builder returns the ordered list of stages handed to ``aggregate``.
"""

from datetime import datetime
from typing import Any, Optional

Stage = dict[str, Any]
Pipeline = list[Stage]

TOP_RATED_THRESHOLD = 4.5
MONTHS_IN_YEAR = 12

# Earth's mean radius, used to turn a distance into radians
EARTH_RADIUS_MI = 3963.2
EARTH_RADIUS_KM = 6378.1

# $geoNear reports meters
METERS_TO_MILES = 0.000621371
METERS_TO_KILOMETERS = 0.001


def is_miles(unit: str) -> bool:
    """Only 'mi' selects miles; any other unit means kilometers."""
    return unit == "mi"


def radius_in_radians(distance: float, unit: str) -> float:
    """Convert a distance in ``unit`` to the angular radius $centerSphere expects."""
    return distance / (EARTH_RADIUS_MI if is_miles(unit) else EARTH_RADIUS_KM)


def unit_label(unit: str) -> str:
    """The unit a distance is actually measured in: "mi" or "km"."""
    return "mi" if is_miles(unit) else "km"


def distance_multiplier(unit: str) -> float:
    """Factor converting $geoNear meters into ``unit``."""
    return METERS_TO_MILES if is_miles(unit) else METERS_TO_KILOMETERS


def tour_stats_pipeline() -> Pipeline:
    """Per-difficulty statistics of the top-rated tours, cheapest group first."""
    return [
        {"$match": {"ratingsAverage": {"$gte": TOP_RATED_THRESHOLD}}},
        {
            "$group": {
                "_id": {"$toUpper": "$difficulty"},
                "numTours": {"$sum": 1},
                "numRatings": {"$sum": "$ratingsQuantity"},
                "avgRating": {"$avg": "$ratingsAverage"},
                "avgPrice": {"$avg": "$price"},
                "minPrice": {"$min": "$price"},
                "maxPrice": {"$max": "$price"},
            }
        },
        {"$sort": {"avgPrice": 1}},
    ]


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """First and last day of ``year`` at midnight UTC (naive, as stored)."""
    return datetime(year, 1, 1), datetime(year, 12, 31)


def monthly_plan_pipeline(year: Optional[int]) -> Pipeline:
    """
    Tours grouped by the month they start in during ``year``.

    One row per month with at least one start date, busiest month first.
    ``year=None`` (unparseable input) yields a match that selects nothing.
    """
    if year is None:
        date_match: dict[str, Any] = {"$in": []}
    else:
        start, end = year_bounds(year)
        date_match = {"$gte": start, "$lte": end}

    return [
        {"$unwind": "$startDates"},
        {"$match": {"startDates": date_match}},
        {
            "$group": {
                "_id": {"$month": "$startDates"},
                "numToursOfMonth": {"$sum": 1},
                "tours": {"$push": "$name"},
            }
        },
        {"$addFields": {"month": "$_id"}},
        {"$project": {"_id": 0}},
        {"$sort": {"numToursOfMonth": -1}},
        {"$limit": MONTHS_IN_YEAR},
    ]


def tours_within_filter(lat: Optional[float], lng: Optional[float], radius: float) -> dict[str, Any]:
    """Find filter for tours starting inside the spherical cap around (lat, lng)."""
    return {
        "startLocation": {
            "$geoWithin": {"$centerSphere": [[lng, lat], radius]}
        }
    }


def distances_pipeline(lat: Optional[float], lng: Optional[float], multiplier: float) -> Pipeline:
    """Every tour's distance from (lat, lng), nearest first, reduced to name and distance."""
    return [
        # $geoNear is only valid as the first stage
        {
            "$geoNear": {
                "near": {"type": "Point", "coordinates": [lng, lat]},
                "distanceField": "distance",
                "distanceMultiplier": multiplier,
            }
        },
        {"$project": {"distance": 1, "name": 1}},
    ]
