"""
Error types for HiveMind Workspace.

Lookup failures are raised before any state is touched. Agent execution
failures are captured by the Agent Hub and recorded on the task instead.
"""

from typing import Any, Dict, Optional


class HiveMindError(Exception):
    """Base exception for HiveMind errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)


class NotFoundError(HiveMindError, LookupError):
    """A session, agent or task lookup failed."""


class SessionNotFoundError(NotFoundError):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found", {"session_id": session_id})
        self.session_id = session_id


class AgentNotFoundError(NotFoundError):
    def __init__(self, agent_ref: str):
        super().__init__(f"Agent {agent_ref} not found", {"agent": agent_ref})
        self.agent_ref = agent_ref


class SessionClosedError(HiveMindError):
    """Mutation attempted on a session that has already ended."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} has ended", {"session_id": session_id})
        self.session_id = session_id


class SessionIdExhaustedError(HiveMindError):
    """No unused session id could be generated."""


class AgentExecutionError(HiveMindError):
    """Raised by agent executors when a provider call fails."""
