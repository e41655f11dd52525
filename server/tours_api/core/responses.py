"""JSend-style success envelopes shared by the routers."""

from typing import Any, Optional

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response


def encode(content: Any) -> Any:
    """Make Mongo documents JSON serializable (ObjectId becomes its hex string)."""
    return jsonable_encoder(content, custom_encoder={ObjectId: str})


def success_response(
    data: Optional[dict] = None,
    status_code: int = 200,
    results: Optional[int] = None,
) -> Response:
    """
    Build a ``{"status": "success", ...}`` response.

    Args:
        data: Payload placed under ``data``
        status_code: HTTP status code
        results: Item count, included for list responses

    Returns:
        Response: JSON response, or an empty one for 204
    """
    if status_code == 204:
        return Response(status_code=204)

    content: dict[str, Any] = {"status": "success"}
    if results is not None:
        content["results"] = results
    content["data"] = data

    return JSONResponse(status_code=status_code, content=encode(content))
