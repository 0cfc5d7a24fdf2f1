"""Request lifecycle: enforces the phases one ``message/send`` goes through."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from agentwire.exceptions import RequestStateError

_logger = logging.getLogger(__name__)


class RequestPhase(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    SESSION_RESOLVED = "session_resolved"
    EXECUTED = "executed"
    RESPONDED = "responded"
    FAILED = "failed"


TransitionCallback = Callable[[str, RequestPhase, RequestPhase], None]

# Any non-terminal phase may fail
VALID_TRANSITIONS: dict[RequestPhase, set[RequestPhase]] = {
    RequestPhase.RECEIVED: {RequestPhase.VALIDATED, RequestPhase.FAILED},
    RequestPhase.VALIDATED: {RequestPhase.SESSION_RESOLVED, RequestPhase.FAILED},
    RequestPhase.SESSION_RESOLVED: {RequestPhase.EXECUTED, RequestPhase.FAILED},
    RequestPhase.EXECUTED: {RequestPhase.RESPONDED, RequestPhase.FAILED},
    RequestPhase.RESPONDED: set(),  # terminal
    RequestPhase.FAILED: set(),  # terminal
}


class RequestLifecycle:
    """Tracks the phase of a single request.

    Lives for one request only, so no locking is needed.
    """

    def __init__(self, request_ref: str):
        self.request_ref = request_ref
        self._phase = RequestPhase.RECEIVED
        self._listeners: list[TransitionCallback] = []

    @property
    def phase(self) -> RequestPhase:
        return self._phase

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self._phase]

    def transition(self, target: RequestPhase) -> None:
        valid = VALID_TRANSITIONS.get(self._phase, set())
        if target not in valid:
            raise RequestStateError(
                f"Cannot move request {self.request_ref} "
                f"from {self._phase.value} to {target.value}"
            )
        old = self._phase
        self._phase = target
        _logger.debug("Request %s: %s -> %s", self.request_ref, old.value, target.value)
        for listener in self._listeners:
            listener(self.request_ref, old, target)

    def fail(self) -> None:
        """Move to FAILED unless the request already finished."""
        if not self.is_terminal:
            self.transition(RequestPhase.FAILED)

    def on_transition(self, callback: TransitionCallback) -> None:
        self._listeners.append(callback)
