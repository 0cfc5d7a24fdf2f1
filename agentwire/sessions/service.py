"""Session service: the single owner of session state and history."""

from __future__ import annotations

import asyncio
import copy
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Mapping

import orjson

from agentwire.exceptions import (
    SessionConflictError,
    SessionNotFoundError,
    SessionStateError,
)
from agentwire.kernel.events import Event
from agentwire.sessions.session import TEMP_PREFIX, Session
from agentwire.types import new_uuid

_logger = logging.getLogger(__name__)

SessionKey = tuple[str, str, str]


class BaseSessionService(ABC):
    @abstractmethod
    async def create_session(
        self,
        app_name: str,
        user_id: str,
        state: Mapping[str, Any] | None = None,
        session_id: str | None = None,
    ) -> Session: ...

    @abstractmethod
    async def get_session(
        self, app_name: str, user_id: str, session_id: str,
    ) -> Session | None: ...

    @abstractmethod
    async def apply_state_delta(self, session: Session, delta: Mapping[str, Any]) -> None: ...

    @abstractmethod
    async def append_event(self, session: Session, event: Event) -> Event: ...

    @abstractmethod
    def turn_lock(self, session: Session) -> asyncio.Lock: ...


class InMemorySessionService(BaseSessionService):
    """Process-local session store.

    Two lock maps, both keyed by (app, user, session id):
    - mutation locks serialize create / delta / append on one session
    - turn locks let a runner hold a session for a whole turn
    Distinct sessions never contend.
    """

    def __init__(self) -> None:
        self._sessions: dict[SessionKey, Session] = {}
        self._mutation_locks: dict[SessionKey, asyncio.Lock] = {}
        self._turn_locks: dict[SessionKey, asyncio.Lock] = {}

    def _mutation_lock(self, key: SessionKey) -> asyncio.Lock:
        lock = self._mutation_locks.get(key)
        if lock is None:
            lock = self._mutation_locks[key] = asyncio.Lock()
        return lock

    def turn_lock(self, session: Session) -> asyncio.Lock:
        lock = self._turn_locks.get(session.key)
        if lock is None:
            lock = self._turn_locks[session.key] = asyncio.Lock()
        return lock

    async def create_session(
        self,
        app_name: str,
        user_id: str,
        state: Mapping[str, Any] | None = None,
        session_id: str | None = None,
    ) -> Session:
        """Create a session. A given ``session_id`` must not exist yet."""
        session_id = session_id or new_uuid()
        key = (app_name, user_id, session_id)
        async with self._mutation_lock(key):
            if key in self._sessions:
                raise SessionConflictError(
                    f"Session {session_id} already exists for {app_name}/{user_id}"
                )
            return self._create_locked(key, state)

    async def get_or_create_session(
        self,
        app_name: str,
        user_id: str,
        session_id: str,
        state: Mapping[str, Any] | None = None,
    ) -> tuple[Session, bool]:
        """Return the session and whether it was created by this call."""
        key = (app_name, user_id, session_id)
        async with self._mutation_lock(key):
            existing = self._sessions.get(key)
            if existing is not None:
                return existing, False
            return self._create_locked(key, state), True

    def _create_locked(self, key: SessionKey, state: Mapping[str, Any] | None) -> Session:
        app_name, user_id, session_id = key
        initial = _checked_copy(dict(state or {}))
        session = Session(
            id=session_id,
            app_name=app_name,
            user_id=user_id,
            state={k: v for k, v in initial.items() if not k.startswith(TEMP_PREFIX)},
        )
        self._sessions[key] = session
        _logger.info("Created session %s for %s/%s", session_id, app_name, user_id)
        return session

    async def get_session(
        self, app_name: str, user_id: str, session_id: str,
    ) -> Session | None:
        return self._sessions.get((app_name, user_id, session_id))

    async def list_sessions(self, app_name: str, user_id: str | None = None) -> list[Session]:
        return [
            s for (app, user, _), s in self._sessions.items()
            if app == app_name and (user_id is None or user == user_id)
        ]

    async def delete_session(self, app_name: str, user_id: str, session_id: str) -> None:
        key = (app_name, user_id, session_id)
        async with self._mutation_lock(key):
            self._sessions.pop(key, None)
        self._mutation_locks.pop(key, None)
        self._turn_locks.pop(key, None)

    async def apply_state_delta(self, session: Session, delta: Mapping[str, Any]) -> None:
        """Merge ``delta`` into the session state. Last writer wins per key."""
        async with self._mutation_lock(self._require(session)):
            self._apply_locked(session, delta)

    async def append_event(self, session: Session, event: Event) -> Event:
        """Append to history and apply the event's state delta, atomically."""
        async with self._mutation_lock(self._require(session)):
            if event.actions.state_delta:
                self._apply_locked(session, event.actions.state_delta)
            session.events.append(event)
            session.last_update_time = event.timestamp
        return event

    def _require(self, session: Session) -> SessionKey:
        if session.key not in self._sessions:
            raise SessionNotFoundError(
                f"Session {session.id} not found for {session.app_name}/{session.user_id}"
            )
        return session.key

    def _apply_locked(self, session: Session, delta: Mapping[str, Any]) -> None:
        updates = _checked_copy(
            {k: v for k, v in delta.items() if not k.startswith(TEMP_PREFIX)}
        )
        session.state.update(updates)
        session.last_update_time = time.time()


def _checked_copy(values: dict[str, Any]) -> dict[str, Any]:
    """Deep-copy state values after checking they are JSON-serializable."""
    for key, value in values.items():
        if not isinstance(key, str):
            raise SessionStateError(f"State keys must be strings, got {key!r}")
        try:
            orjson.dumps(value)
        except TypeError as e:
            raise SessionStateError(f"State value for {key!r} is not JSON-serializable") from e
    return copy.deepcopy(values)
