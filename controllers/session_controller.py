"""Session helpers backing the browser UI."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, UploadFile

from services.session.orchestrator import ClientOrchestrator
from services.session.session_store import SessionStore
from utils.media_validation import read_image_payload


def session_store(request: Request) -> SessionStore:
	store = getattr(request.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


def get_orchestrator(request: Request, session_id: str) -> ClientOrchestrator:
	try:
		return session_store(request).get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


def _log_body(orchestrator: ClientOrchestrator, reply) -> Dict[str, Any]:
	return {
		"message": reply.to_dict() if reply else None,
		"messages": [message.to_dict() for message in orchestrator.messages],
	}


async def start_session(request: Request) -> Dict[str, Any]:
	"""Create a new session and return its id with the empty snapshot."""
	session_id, orchestrator = session_store(request).create()
	return {"session_id": session_id, **orchestrator.snapshot()}


async def get_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return channel states, inputs, and the message log."""
	return {"session_id": session_id, **get_orchestrator(request, session_id).snapshot()}


async def post_message(request: Request, session_id: str, text: Any) -> Dict[str, Any]:
	"""Submit a chat message and return the assistant reply with the updated log."""
	orchestrator = get_orchestrator(request, session_id)
	reply = await orchestrator.send_message(text)
	return _log_body(orchestrator, reply)


async def post_image(request: Request, session_id: str, image: Optional[UploadFile]) -> Dict[str, Any]:
	"""Submit an image for damage analysis and return the report with the updated log."""
	orchestrator = get_orchestrator(request, session_id)
	payload = await read_image_payload(image)
	report = await orchestrator.analyze_image(payload)
	return _log_body(orchestrator, report)


async def reset_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Clear the session log; refused while a call is in flight."""
	orchestrator = get_orchestrator(request, session_id)
	orchestrator.reset()
	return {"session_id": session_id, **orchestrator.snapshot()}


async def close_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Drop the session entirely, as when the page is reloaded or closed."""
	try:
		session_store(request).close(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"session_id": session_id, "closed": True}
