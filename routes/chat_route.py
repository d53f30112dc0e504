from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel

from controllers.chat_controller import send_chat
from services.errors import AssistantError
from utils.http_errors import error_response

router = APIRouter(prefix="/api")


class ChatRequest(BaseModel):
    # Left untyped so a non-string message reaches the handler's own input check.
    message: Any = None


@router.post("/chat")
async def post_chat(request: Request, payload: Optional[ChatRequest] = Body(None)):
    """Send one message to the model and return its reply."""
    try:
        return await send_chat(request, payload.message if payload else None)
    except AssistantError as exc:
        return error_response(exc.report)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
