from typing import Any, Dict, Optional

from fastapi import Request, UploadFile

from services.damage.analysis_handler import DamageAnalysisHandler
from utils.media_validation import read_image_payload


async def analyze_damage(request: Request, image: Optional[UploadFile]) -> Dict[str, Any]:
    """Analyze an uploaded image and return the damage endpoint body.

    Args:
        request: FastAPI Request (used to access the shared generator on app.state).
        image: The `image` form field, or None when the form has none.

    Returns:
        A dict with `damageAnalysis`, `preventionInstructions` and `success`.

    Raises:
        AssistantError: with the classified category of the failing step.
    """
    payload = await read_image_payload(image)
    handler = DamageAnalysisHandler(getattr(request.app.state, "generator", None))
    result = await handler.handle(payload)
    return result.to_dict()
