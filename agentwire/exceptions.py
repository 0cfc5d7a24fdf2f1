"""Custom exception hierarchy for agentwire."""

from __future__ import annotations


class AgentWireError(Exception):
    """Base for all agentwire errors."""


class ConfigurationError(AgentWireError):
    """Invalid static configuration, e.g. a bad Agent Card. Fatal at startup."""


class AgentCardResolutionError(ConfigurationError):
    """A remote agent's card could not be loaded or parsed."""


class MalformedRequestError(AgentWireError):
    """The JSON-RPC envelope is unusable. Carries the code to answer with."""

    def __init__(
        self,
        message: str,
        code: int = -32600,
        request_id: int | str | None = None,
    ) -> None:
        self.code = code
        self.request_id = request_id
        super().__init__(message)


class SessionConflictError(AgentWireError):
    """An explicit session id is already taken."""


class SessionNotFoundError(AgentWireError):
    """No session exists for the given (app, user, session id)."""


class SessionStateError(AgentWireError):
    """A state value cannot be stored in a session."""


class InvalidMessageError(AgentWireError):
    """Message content is empty or malformed."""


class AgentExecutionError(AgentWireError):
    """The agent failed while producing events for a turn."""


class AgentTimeoutError(AgentWireError):
    """The agent did not finish within the configured budget. Retryable."""


class LlmCallsLimitExceededError(AgentWireError):
    """An invocation made more model calls than its run config allows."""


class RequestStateError(AgentWireError):
    """Invalid request lifecycle transition."""


class ToolNotFoundError(AgentWireError):
    """Requested tool does not exist in the registry."""


class ToolExecutionError(AgentWireError):
    """A tool failed during execution."""


class A2AClientError(AgentWireError):
    """A call to a remote A2A agent failed."""
