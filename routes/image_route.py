"""Thumbnail previews of uploaded damage photos."""

from fastapi import APIRouter, Request

from controllers.image_controller import get_thumbnail

router = APIRouter(prefix="/session/{session_id}/images", tags=["images"])


@router.get("/{image_ref}/thumbnail", summary="Thumbnail of an uploaded photo")
async def thumbnail_route(request: Request, session_id: str, image_ref: str):
    return await get_thumbnail(request, session_id, image_ref)
