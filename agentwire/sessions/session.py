"""Session: one ongoing conversation."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, Field

from agentwire.kernel.events import Event

TEMP_PREFIX = "temp:"


class Session(BaseModel):
    """State and history for a conversation between one user and one app.

    Only the session service mutates a session. Everyone else borrows it.
    """

    id: str
    app_name: str
    user_id: str
    state: dict[str, Any] = Field(default_factory=dict)
    events: list[Event] = Field(default_factory=list)
    last_update_time: float = Field(default_factory=time.time)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.app_name, self.user_id, self.id)

    def has_event(self, event_id: str) -> bool:
        return any(e.id == event_id for e in self.events)
