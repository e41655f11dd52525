#!/usr/bin/env python3
"""Create the MongoDB indexes and load sample tours."""

import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from tours_api.core.database import close_db, get_database, init_db
from tours_api.models import Tour
from tours_api.schemas.tour import CreateTourRequest

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_TOURS = [
    {
        "name": "The Forest Hiker",
        "duration": 5,
        "maxGroupSize": 25,
        "difficulty": "easy",
        "ratingsAverage": 4.7,
        "ratingsQuantity": 37,
        "price": 397,
        "summary": "Breathtaking hike through the Canadian Banff National Park",
        "imageCover": "tour-1-cover.jpg",
        "images": ["tour-1-1.jpg", "tour-1-2.jpg", "tour-1-3.jpg"],
        "startDates": [datetime(2021, 4, 25, 9), datetime(2021, 7, 20, 9), datetime(2021, 10, 5, 9)],
        "startLocation": {
            "type": "Point",
            "coordinates": [-115.570154, 51.178456],
            "address": "224 Banff Ave, Banff, AB, Canada",
            "description": "Banff, CAN",
        },
    },
    {
        "name": "The Sea Explorer",
        "duration": 7,
        "maxGroupSize": 15,
        "difficulty": "medium",
        "ratingsAverage": 4.8,
        "ratingsQuantity": 23,
        "price": 497,
        "summary": "Exploring the jaw-dropping US east coast by foot and by boat",
        "imageCover": "tour-2-cover.jpg",
        "images": ["tour-2-1.jpg", "tour-2-2.jpg", "tour-2-3.jpg"],
        "startDates": [datetime(2021, 6, 19, 9), datetime(2021, 7, 20, 9), datetime(2021, 8, 18, 9)],
        "startLocation": {
            "type": "Point",
            "coordinates": [-80.185942, 25.774772],
            "address": "301 Biscayne Blvd, Miami, FL 33132, USA",
            "description": "Miami, USA",
        },
    },
    {
        "name": "The Snow Adventurer",
        "duration": 4,
        "maxGroupSize": 10,
        "difficulty": "difficult",
        "ratingsAverage": 4.5,
        "ratingsQuantity": 13,
        "price": 997,
        "summary": "Exciting adventure in the snow with snowboarding and skiing",
        "imageCover": "tour-3-cover.jpg",
        "images": ["tour-3-1.jpg", "tour-3-2.jpg", "tour-3-3.jpg"],
        "startDates": [datetime(2022, 1, 5, 10), datetime(2022, 2, 12, 10), datetime(2023, 1, 6, 10)],
        "startLocation": {
            "type": "Point",
            "coordinates": [-106.822318, 39.190872],
            "address": "419 S Mill St, Aspen, CO 81611, USA",
            "description": "Aspen, USA",
        },
    },
]


async def create_sample_data():
    """Insert the sample tours unless the collection already holds tours."""
    tours = get_database()[Tour.collection]

    if await tours.count_documents({}) > 0:
        logger.info("Sample data already exists, skipping...")
        return

    documents = [
        Tour.before_insert(
            CreateTourRequest.model_validate(sample).model_dump(by_alias=True, exclude_none=True)
        )
        for sample in SAMPLE_TOURS
    ]
    result = await tours.insert_many(documents)
    logger.info(f"Inserted {len(result.inserted_ids)} sample tours")


async def main():
    logger.info("Starting tours API setup...")

    try:
        await init_db()
        logger.info("Indexes created")

        await create_sample_data()
    finally:
        await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn tours_api.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
