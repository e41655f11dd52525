"""Tour service for analytics and geospatial queries."""

import logging
import math
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

from ..core.observability import metrics_collector
from ..models.tour import Tour
from .pipelines import (
    distance_multiplier,
    distances_pipeline,
    monthly_plan_pipeline,
    radius_in_radians,
    tour_stats_pipeline,
    tours_within_filter,
    unit_label,
)

logger = logging.getLogger(__name__)

LATLNG_FORMAT_MESSAGE = "Please provide latitude and longitude in the format lat,lng."


def _to_float(value: str) -> Optional[float]:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_latlng(latlng: str) -> tuple[Optional[float], Optional[float]]:
    """
    Split a ``"lat,lng"`` path segment.

    Returns:
        (lat, lng) from the first two comma-separated parts; either is
        None when missing or not a finite number
    """
    lat, lng, *_ = [part.strip() for part in latlng.split(",")] + [""]
    return (
        _to_float(lat) if lat else None,
        _to_float(lng) if lng else None,
    )


def parse_year(value: str) -> Optional[int]:
    """Parse the plan year; None when it is not an integer or out of datetime range."""
    try:
        year = int(value)
    except ValueError:
        return None
    return year if 1 <= year <= 9999 else None


class TourService:
    """Service for tour aggregations and geospatial lookups."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    @property
    def tours(self) -> AsyncIOMotorCollection:
        return self.db[Tour.collection]

    async def get_tour_stats(self) -> list[dict]:
        """
        Statistics for tours rated 4.5 or better, grouped by difficulty.

        Returns:
            One row per upper-cased difficulty, ordered by average price
        """
        metrics_collector.record_analytics_query("stats")
        stats = await self.tours.aggregate(tour_stats_pipeline()).to_list(length=None)

        logger.info("Tour stats computed", extra={"groups": len(stats)})
        return stats

    async def get_monthly_plan(self, year: Optional[int]) -> list[dict]:
        """
        Tours starting each month of ``year``, busiest month first.

        Args:
            year: Calendar year, or None to match nothing

        Returns:
            Up to 12 rows with ``month``, ``numToursOfMonth`` and ``tours``
        """
        metrics_collector.record_analytics_query("monthly_plan")
        plan = await self.tours.aggregate(monthly_plan_pipeline(year)).to_list(length=None)

        logger.info("Monthly plan computed", extra={"year": year, "months": len(plan)})
        return plan

    async def get_tours_within(
        self,
        distance: float,
        lat: Optional[float],
        lng: Optional[float],
        unit: str,
    ) -> list[dict]:
        """
        Tours whose start location lies within ``distance`` of (lat, lng).

        Args:
            distance: Radius in ``unit``
            lat: Latitude of the centre
            lng: Longitude of the centre
            unit: "mi" for miles, anything else for kilometers

        Returns:
            Matching tour documents
        """
        radius = radius_in_radians(distance, unit)
        metrics_collector.record_geo_query("within", unit_label(unit))

        tours = await self.tours.find(tours_within_filter(lat, lng, radius)).to_list(length=None)

        logger.info(
            "Tours within radius found",
            extra={
                "distance": distance,
                "unit": unit,
                "radius_radians": radius,
                "lat": lat,
                "lng": lng,
                "count": len(tours),
            }
        )
        return tours

    async def get_distances(
        self,
        lat: Optional[float],
        lng: Optional[float],
        unit: str,
    ) -> list[dict]:
        """
        Distance from (lat, lng) to every tour, nearest first.

        Args:
            lat: Latitude of the reference point
            lng: Longitude of the reference point
            unit: "mi" for miles, anything else for kilometers

        Returns:
            Documents holding only ``_id``, ``name`` and ``distance``
        """
        multiplier = distance_multiplier(unit)
        metrics_collector.record_geo_query("distances", unit_label(unit))

        distances = await self.tours.aggregate(
            distances_pipeline(lat, lng, multiplier)
        ).to_list(length=None)

        logger.info(
            "Tour distances computed",
            extra={"unit": unit, "multiplier": multiplier, "count": len(distances)}
        )
        return distances
