"""Images router - photo search for the event image picker"""

from fastapi import APIRouter, Depends, Query

from shiftease.auth.dependencies import require_admin
from shiftease.auth.models import Caller
from shiftease.services.image_service import (
    DEFAULT_PER_PAGE,
    ImageService,
    get_image_service,
)

router = APIRouter(prefix="/images", tags=["Images"])


@router.get("/search", summary="Search event images")
async def search_images(
    q: str = Query("", description="Search terms"),
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=80),
    _: Caller = Depends(require_admin),
    image_service: ImageService = Depends(get_image_service),
):
    """
    Returns ``{items, page, total}`` and an ``error`` code when the
    provider could not be reached
    """
    return await image_service.search(q, page=page, per_page=per_page)
