"""Tour image upload filtering and resizing."""

import asyncio
import io
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from fastapi import UploadFile
from PIL import Image, ImageOps

from ..core.exceptions import BadRequestError
from ..core.observability import metrics_collector
from ..schemas.tour import MAX_GALLERY_IMAGES, TourImages

logger = logging.getLogger(__name__)

NOT_AN_IMAGE_MESSAGE = "Not an image! Please upload only images."

# 3:2 output
IMAGE_SIZE = (2000, 1333)
JPEG_QUALITY = 90

COVER_FIELD = "imageCover"
GALLERY_FIELD = "images"
UPLOAD_LIMITS = {COVER_FIELD: 1, GALLERY_FIELD: MAX_GALLERY_IMAGES}


@dataclass(frozen=True)
class BufferedUpload:
    """An accepted upload held in memory until it is resized."""

    field: str
    filename: str
    content_type: str
    buffer: bytes


def image_file_filter(content_type: Optional[str]) -> bool:
    """
    Accept files whose declared MIME type is an image.

    Returns:
        True when accepted

    Raises:
        BadRequestError: For any other type
    """
    if content_type and content_type.startswith("image"):
        return True

    metrics_collector.record_upload_rejected()
    logger.warning("Upload rejected", extra={"content_type": content_type})
    raise BadRequestError(detail=NOT_AN_IMAGE_MESSAGE)


async def buffer_uploads(field: str, files: Optional[Sequence[UploadFile]]) -> list[BufferedUpload]:
    """
    Filter and read the files sent under ``field`` into memory.

    Args:
        field: Multipart field name, one of ``UPLOAD_LIMITS``
        files: Uploaded files, possibly None when the field was not sent

    Returns:
        Accepted uploads in the order they were sent

    Raises:
        BadRequestError: On a non-image file or too many files for the field
    """
    if not files:
        return []

    max_count = UPLOAD_LIMITS[field]
    if len(files) > max_count:
        raise BadRequestError(
            detail=f"Too many files for field '{field}' (maximum {max_count}).",
            extensions={"field": field, "max_count": max_count},
        )

    uploads = []
    for file in files:
        image_file_filter(file.content_type)
        uploads.append(
            BufferedUpload(
                field=field,
                filename=file.filename or "",
                content_type=file.content_type,
                buffer=await file.read(),
            )
        )
    return uploads


def resize_to_jpeg(buffer: bytes, destination: Path) -> None:
    """Centre-crop ``buffer`` to fill IMAGE_SIZE and write it as JPEG."""
    with Image.open(io.BytesIO(buffer)) as image:
        resized = ImageOps.fit(image.convert("RGB"), IMAGE_SIZE, method=Image.Resampling.LANCZOS)
        resized.save(destination, format="JPEG", quality=JPEG_QUALITY)


def _now_ms() -> int:
    return int(time.time() * 1000)


class TourImageProcessor:
    """
    Resize a tour's cover and gallery uploads and name the written files.

    Files land in ``output_dir`` as ``tour-<id>-<ms>-cover.jpeg`` and
    ``tour-<id>-<ms>-<n>.jpeg``. Nothing is removed if a later file fails.
    """

    def __init__(self, output_dir: Path, clock: Callable[[], int] = _now_ms):
        self.output_dir = Path(output_dir)
        self.clock = clock

    async def _write(self, upload: BufferedUpload, filename: str) -> str:
        await asyncio.to_thread(resize_to_jpeg, upload.buffer, self.output_dir / filename)
        return filename

    async def process(
        self,
        tour_id: str,
        cover: Sequence[BufferedUpload],
        gallery: Sequence[BufferedUpload],
    ) -> Optional[TourImages]:
        """
        Resize the cover, then every gallery image concurrently.

        Args:
            tour_id: Tour the images belong to
            cover: At most one cover upload
            gallery: At most three gallery uploads

        Returns:
            The generated filenames, or None when either group is empty
            (nothing is written in that case)
        """
        if not cover or not gallery:
            logger.info(
                "Image processing skipped",
                extra={"tour_id": tour_id, "cover": len(cover), "gallery": len(gallery)}
            )
            return None

        self.output_dir.mkdir(parents=True, exist_ok=True)

        image_cover = await self._write(cover[0], f"tour-{tour_id}-{self.clock()}-cover.jpeg")
        metrics_collector.record_image_processed("cover")

        images = await asyncio.gather(*(
            self._write(upload, f"tour-{tour_id}-{self.clock()}-{index}.jpeg")
            for index, upload in enumerate(gallery, start=1)
        ))
        for _ in images:
            metrics_collector.record_image_processed("gallery")

        logger.info(
            "Tour images processed",
            extra={"tour_id": tour_id, "image_cover": image_cover, "images": list(images)}
        )

        return TourImages(image_cover=image_cover, images=list(images))
