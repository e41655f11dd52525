"""Response schemas for the tour aggregation endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TourStats(BaseModel):
    """Statistics for one difficulty level."""

    model_config = ConfigDict(populate_by_name=True)

    difficulty: str = Field(..., alias="_id", description="Upper-cased difficulty")
    num_tours: int = Field(..., alias="numTours")
    num_ratings: int = Field(..., alias="numRatings")
    avg_rating: float = Field(..., alias="avgRating")
    avg_price: float = Field(..., alias="avgPrice")
    min_price: float = Field(..., alias="minPrice")
    max_price: float = Field(..., alias="maxPrice")


class MonthlyPlanEntry(BaseModel):
    """Tours starting in one calendar month."""

    model_config = ConfigDict(populate_by_name=True)

    month: int = Field(..., ge=1, le=12)
    num_tours_of_month: int = Field(..., alias="numToursOfMonth")
    tours: list[str] = Field(..., description="Names of the tours starting that month")


class TourDistance(BaseModel):
    """Distance from a point to a tour's start location."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    distance: float = Field(..., description="Distance in the requested unit")


class StatsData(BaseModel):
    stats: list[TourStats]


class StatsResponse(BaseModel):
    status: str = "success"
    data: StatsData


class PlanData(BaseModel):
    plan: list[MonthlyPlanEntry]


class PlanResponse(BaseModel):
    status: str = "success"
    data: PlanData


class DistancesData(BaseModel):
    data: list[TourDistance]


class DistancesResponse(BaseModel):
    status: str = "success"
    results: Optional[int] = None
    data: DistancesData
