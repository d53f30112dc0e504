"""FastAPI routes for per-browser chat sessions."""

from typing import Any, Optional

from fastapi import APIRouter, Body, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.session_controller import (
	close_session,
	get_session,
	post_image,
	post_message,
	reset_session,
	start_session,
)
from services.session.orchestrator import ChannelBusyError

router = APIRouter(prefix="/session")


class MessagePayload(BaseModel):
	message: Any = None


@router.post("")
async def start_session_route(request: Request):
	try:
		return await start_session(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	try:
		return await get_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/messages")
async def post_message_route(request: Request, session_id: str, payload: Optional[MessagePayload] = Body(None)):
	try:
		return await post_message(request, session_id, payload.message if payload else None)
	except ChannelBusyError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/analyze")
async def post_image_route(request: Request, session_id: str, image: Optional[UploadFile] = File(None)):
	try:
		return await post_image(request, session_id, image)
	except ChannelBusyError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/reset")
async def reset_session_route(request: Request, session_id: str):
	try:
		return await reset_session(request, session_id)
	except ChannelBusyError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}")
async def close_session_route(request: Request, session_id: str):
	try:
		return await close_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
