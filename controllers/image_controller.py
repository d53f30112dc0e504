from fastapi import HTTPException, Request
from fastapi.responses import Response

from controllers.session_controller import get_orchestrator


async def get_thumbnail(request: Request, session_id: str, image_ref: str) -> Response:
    """Return the PNG thumbnail of an image uploaded in this session.

    Args:
        request: FastAPI Request (to reach the session store).
        session_id: Session that received the upload.
        image_ref: Opaque reference stored on the damage-report messages.

    Raises:
        HTTPException(404) if the session or the thumbnail does not exist.
    """
    image_store = get_orchestrator(request, session_id).image_store
    thumbnail = image_store.get(image_ref) if image_store is not None else None
    if thumbnail is None:
        raise HTTPException(status_code=404, detail="Thumbnail not found")
    return Response(content=thumbnail, media_type="image/png")
