"""
Purpose:
- Map a browser session id (cookie) to its PromptController.
- In memory only, least-recently-used eviction once max_sessions is reached.
"""

from __future__ import annotations
from collections import OrderedDict
from typing import Callable, Optional, Tuple
from uuid import uuid4

from loguru import logger

from .controller import PromptController

class SessionRegistry:
    def __init__(self, factory: Callable[[], PromptController], max_sessions: int = 256):
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self._factory = factory
        self._max = max_sessions
        self._sessions: "OrderedDict[str, PromptController]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get_or_create(self, session_id: Optional[str]) -> Tuple[str, PromptController]:
        """
        Return (session_id, controller). Unknown or missing ids get a fresh session.
        """
        if session_id and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return session_id, self._sessions[session_id]

        new_id = uuid4().hex
        self._sessions[new_id] = self._factory()
        while len(self._sessions) > self._max:
            evicted = self._evict_one(keep=new_id)
            if evicted is None:
                break
        return new_id, self._sessions[new_id]

    def _evict_one(self, keep: str) -> Optional[str]:
        # never drop a session with a request in flight
        for sid, ctrl in self._sessions.items():
            if sid != keep and not ctrl.state.is_loading:
                del self._sessions[sid]
                logger.debug("Evicted session {}", sid)
                return sid
        return None
