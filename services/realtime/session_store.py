"""In-memory registry of live voice chat connections."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import uuid4

from models.session_models import VoiceSession


class SessionStore:
	"""Map connection ids to their voice sessions.

	One instance lives on ``app.state`` and is shared by every websocket handler
	running on the event loop.
	"""

	def __init__(self) -> None:
		self._sessions: Dict[str, VoiceSession] = {}

	def register(self, websocket: Any) -> str:
		"""Create a session for a freshly accepted channel and return its id."""
		session_id = uuid4().hex
		self._sessions[session_id] = VoiceSession(session_id=session_id, websocket=websocket)
		return session_id

	def lookup(self, session_id: str) -> Optional[VoiceSession]:
		"""Return the session or None when it is not registered."""
		return self._sessions.get(session_id)

	def get(self, session_id: str) -> VoiceSession:
		"""Return a session or raise KeyError if missing."""
		state = self._sessions.get(session_id)
		if state is None:
			raise KeyError(f"Session {session_id} not found")
		return state

	def remove(self, session_id: str) -> bool:
		"""Evict a session; removing an unknown id is a no-op returning False."""
		return self._sessions.pop(session_id, None) is not None

	def active_ids(self) -> List[str]:
		return list(self._sessions)

	def __len__(self) -> int:
		return len(self._sessions)

	def __contains__(self, session_id: object) -> bool:
		return session_id in self._sessions
