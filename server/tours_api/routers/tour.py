"""Tour router: CRUD, image uploads, analytics and geospatial search."""

import logging
from pathlib import Path
from typing import Awaitable, Optional

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..core.config import settings
from ..core.database import get_db
from ..core.dependencies import TourManagers, TourStaff
from ..core.exceptions import BadRequestError
from ..core.responses import success_response
from ..models import TOUR_REVIEWS, Tour
from ..schemas.analytics import DistancesResponse, PlanResponse, StatsResponse
from ..schemas.common import DocumentResponse
from ..schemas.tour import CreateTourRequest, UpdateTourRequest
from ..services import handler_factory
from ..services.api_features import alias_top_tours
from ..services.image_service import (
    COVER_FIELD,
    GALLERY_FIELD,
    TourImageProcessor,
    buffer_uploads,
)
from ..services.tour_service import (
    LATLNG_FORMAT_MESSAGE,
    TourService,
    parse_latlng,
    parse_year,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tours", tags=["tours"])

get_all_tours = handler_factory.get_all(Tour)
get_tour = handler_factory.get_one(Tour, populate=TOUR_REVIEWS)
create_tour = handler_factory.create_one(Tour)
update_tour = handler_factory.update_one(Tour)
delete_tour = handler_factory.delete_one(Tour)


def query_params(request: Request) -> dict[str, str]:
    """The request's query string as a mutable dict."""
    return dict(request.query_params)


def top_tours_query(query: dict[str, str] = Depends(query_params)) -> dict[str, str]:
    return alias_top_tours(query)


def get_image_processor() -> TourImageProcessor:
    return TourImageProcessor(Path(settings.tour_images_dir))


def _coordinates_error(lat: Optional[float], lng: Optional[float], latlng: str) -> Optional[BadRequestError]:
    if lat is not None and lng is not None:
        return None
    logger.warning("Missing coordinates", extra={"latlng": latlng})
    return BadRequestError(detail=LATLNG_FORMAT_MESSAGE, extensions={"latlng": latlng})


async def _query_despite_error(query: Awaitable[list[dict]], error: Optional[BadRequestError]) -> list[dict]:
    # FIXME: missing coordinates should short-circuit; the query is still
    # issued with None coordinates and only then is the 400 raised
    try:
        result = await query
    except Exception as exc:
        if error:
            logger.warning(
                "Geo query failed on missing coordinates",
                extra={"error": str(exc)},
                exc_info=True,
            )
            raise error from exc
        raise
    if error:
        raise error
    return result


@router.get("/top-5-cheap", response_model=DocumentResponse)
async def get_top_tours(
    query: dict[str, str] = Depends(top_tours_query),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Response:
    """The five best-rated tours, cheapest first among equal ratings."""
    return await get_all_tours(db, query)


@router.get("/tour-stats", response_model=StatsResponse)
async def get_tour_stats(db: AsyncIOMotorDatabase = Depends(get_db)) -> Response:
    """Statistics of tours rated 4.5+, grouped by difficulty."""
    stats = await TourService(db).get_tour_stats()
    return success_response({"stats": stats})


@router.get("/monthly-plan/{year}", response_model=PlanResponse, dependencies=[TourStaff])
async def get_monthly_plan(year: str, db: AsyncIOMotorDatabase = Depends(get_db)) -> Response:
    """
    Number and names of tours starting in each month of ``year``.

    A year that is not a number gives an empty plan.
    """
    plan = await TourService(db).get_monthly_plan(parse_year(year))
    return success_response({"plan": plan})


@router.get(
    "/tours-within/{distance}/center/{latlng}/unit/{unit}",
    response_model=DistancesResponse,
)
async def get_tours_within(
    distance: float,
    latlng: str,
    unit: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Response:
    """Tours starting within ``distance`` (miles for ``mi``, else km) of ``lat,lng``."""
    lat, lng = parse_latlng(latlng)
    error = _coordinates_error(lat, lng, latlng)

    tours = await _query_despite_error(
        TourService(db).get_tours_within(distance, lat, lng, unit), error
    )
    return success_response({"data": tours}, results=len(tours))


@router.get("/distances/{latlng}/unit/{unit}", response_model=DistancesResponse)
async def get_distances(
    latlng: str,
    unit: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Response:
    """Distance from ``lat,lng`` to every tour, nearest first."""
    lat, lng = parse_latlng(latlng)
    error = _coordinates_error(lat, lng, latlng)

    distances = await _query_despite_error(TourService(db).get_distances(lat, lng, unit), error)
    return success_response({"data": distances})


@router.get("", response_model=DocumentResponse)
async def list_tours(
    query: dict[str, str] = Depends(query_params),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Response:
    """List tours. Supports field filters, ``[gte|gt|lte|lt]``, sort, fields, page and limit."""
    return await get_all_tours(db, query)


@router.post("", response_model=DocumentResponse, status_code=201, dependencies=[TourManagers])
async def create(request: CreateTourRequest, db: AsyncIOMotorDatabase = Depends(get_db)) -> Response:
    return await create_tour(db, request)


@router.get("/{tour_id}", response_model=DocumentResponse)
async def get(tour_id: str, db: AsyncIOMotorDatabase = Depends(get_db)) -> Response:
    """A single tour with its reviews."""
    return await get_tour(db, tour_id)


@router.patch("/{tour_id}", response_model=DocumentResponse, dependencies=[TourManagers])
async def update(
    tour_id: str,
    request: UpdateTourRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Response:
    return await update_tour(db, tour_id, request)


@router.patch("/{tour_id}/images", response_model=DocumentResponse, dependencies=[TourManagers])
async def update_images(
    tour_id: str,
    image_cover: Optional[list[UploadFile]] = File(None, alias=COVER_FIELD),
    images: Optional[list[UploadFile]] = File(None, alias=GALLERY_FIELD),
    processor: TourImageProcessor = Depends(get_image_processor),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> Response:
    """
    Upload a cover (``imageCover``) and up to three gallery images (``images``).

    Both fields must be present for anything to be resized and saved;
    otherwise the tour is returned unchanged.
    """
    cover = await buffer_uploads(COVER_FIELD, image_cover)
    gallery = await buffer_uploads(GALLERY_FIELD, images)

    tour_images = await processor.process(tour_id, cover, gallery)
    return await update_tour(db, tour_id, tour_images or UpdateTourRequest())


@router.delete("/{tour_id}", status_code=204, dependencies=[TourManagers])
async def delete(tour_id: str, db: AsyncIOMotorDatabase = Depends(get_db)) -> Response:
    return await delete_tour(db, tour_id)
