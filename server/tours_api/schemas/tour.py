"""Tour-related Pydantic schemas.

Attribute names are snake_case; documents are stored and served with the
camelCase aliases (``ratingsAverage``, ``imageCover``, ...).
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

MAX_GALLERY_IMAGES = 3


class Difficulty(str, Enum):
    """Tour difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    DIFFICULT = "difficult"


class CamelModel(BaseModel):
    """Base schema reading and writing camelCase document fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )


class GeoPoint(CamelModel):
    """GeoJSON point; coordinates are [longitude, latitude]."""

    type: Literal["Point"] = "Point"
    coordinates: list[float] = Field(..., min_length=2, max_length=2, description="[lng, lat]")
    address: Optional[str] = None
    description: Optional[str] = None


class TourLocation(GeoPoint):
    """A stop on the tour itinerary."""

    day: Optional[int] = Field(None, ge=1, description="Day of the tour this stop is visited")


class CreateTourRequest(CamelModel):
    """Request schema for creating a tour."""

    name: str = Field(..., min_length=10, max_length=40, description="Tour name")
    duration: int = Field(..., ge=1, description="Duration in days")
    max_group_size: int = Field(..., ge=1, description="Maximum group size")
    difficulty: Difficulty = Field(..., description="Difficulty: easy, medium or difficult")
    ratings_average: float = Field(4.5, ge=1, le=5, description="Average rating")
    ratings_quantity: int = Field(0, ge=0, description="Number of ratings")
    price: float = Field(..., gt=0, description="Tour price")
    price_discount: Optional[float] = Field(None, ge=0, description="Discount, below the price")
    summary: str = Field(..., min_length=1, description="Short summary")
    description: Optional[str] = Field(None, description="Long description")
    image_cover: str = Field(..., min_length=1, description="Cover image filename")
    images: list[str] = Field(default_factory=list, max_length=MAX_GALLERY_IMAGES)
    start_dates: list[datetime] = Field(default_factory=list, description="Start dates (UTC)")
    start_location: Optional[GeoPoint] = None
    locations: list[TourLocation] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_discount(self) -> "CreateTourRequest":
        if self.price_discount is not None and self.price_discount >= self.price:
            raise ValueError(
                f"Discount price ({self.price_discount}) should be below regular price"
            )
        return self


class UpdateTourRequest(CamelModel):
    """Request schema for partially updating a tour. Only sent fields change."""

    name: Optional[str] = Field(None, min_length=10, max_length=40)
    duration: Optional[int] = Field(None, ge=1)
    max_group_size: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None
    ratings_average: Optional[float] = Field(None, ge=1, le=5)
    ratings_quantity: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, gt=0)
    price_discount: Optional[float] = Field(None, ge=0)
    summary: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    image_cover: Optional[str] = Field(None, min_length=1)
    images: Optional[list[str]] = Field(None, max_length=MAX_GALLERY_IMAGES)
    start_dates: Optional[list[datetime]] = None
    start_location: Optional[GeoPoint] = None
    locations: Optional[list[TourLocation]] = None

    @model_validator(mode="after")
    def check_discount(self) -> "UpdateTourRequest":
        if (
            self.price is not None
            and self.price_discount is not None
            and self.price_discount >= self.price
        ):
            raise ValueError(
                f"Discount price ({self.price_discount}) should be below regular price"
            )
        return self


class TourImages(CamelModel):
    """Filenames produced by the image pipeline, persisted as a tour update."""

    image_cover: str = Field(..., description="Cover image filename")
    images: list[str] = Field(..., max_length=MAX_GALLERY_IMAGES, description="Gallery filenames in upload order")
