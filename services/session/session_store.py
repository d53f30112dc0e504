"""In-memory registry of browser sessions, one orchestrator each."""

from __future__ import annotations

from typing import Callable, Dict, Tuple
from uuid import uuid4

from services.session.orchestrator import ClientOrchestrator


class SessionStore:
	"""Create, look up and drop per-browser orchestrators by session id."""

	def __init__(self, factory: Callable[[], ClientOrchestrator]) -> None:
		self._factory = factory
		self._sessions: Dict[str, ClientOrchestrator] = {}

	def create(self) -> Tuple[str, ClientOrchestrator]:
		"""Start a new session with an empty log and idle channels."""
		session_id = uuid4().hex
		orchestrator = self._factory()
		self._sessions[session_id] = orchestrator
		return session_id, orchestrator

	def get(self, session_id: str) -> ClientOrchestrator:
		"""Return a session or raise KeyError if missing."""
		orchestrator = self._sessions.get(session_id)
		if orchestrator is None:
			raise KeyError(f"Session {session_id} not found")
		return orchestrator

	def close(self, session_id: str) -> None:
		"""Forget a session. A call still in flight finishes against the dropped log.

		Raises:
			KeyError: if the session does not exist.
		"""
		if self._sessions.pop(session_id, None) is None:
			raise KeyError(f"Session {session_id} not found")

	def __len__(self) -> int:
		return len(self._sessions)
