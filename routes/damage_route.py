"""FastAPI routes for structural damage analysis."""

from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from controllers.damage_controller import analyze_damage
from services.errors import AssistantError
from utils.http_errors import error_response

router = APIRouter(prefix="/api", tags=["damage"])


@router.post("/analyze-damage", summary="Analyze an uploaded photo for damage")
async def post_analyze_damage(request: Request, image: Optional[UploadFile] = File(None)):
    """Describe the damage in the uploaded image and derive prevention instructions.

    Args:
        request: The FastAPI request containing application state.
        image: Uploaded photo of the wall, surface or structure.

    Returns:
        The damage analysis and prevention instructions, with `success: true`.
    """
    try:
        return await analyze_damage(request, image)
    except AssistantError as exc:
        return error_response(exc.report)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise HTTPException(status_code=500, detail=str(exc)) from exc
