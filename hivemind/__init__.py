"""
HiveMind Workspace

Collaborative sessions with a shared budget and a hub of AI agents
that work on demand.
"""

__version__ = "0.1.0"

from .core.session_manager import ParticipantStub, Session, SessionConfig, SessionManager
from .core.agent_hub import AgentHub, AgentTask, TaskStatus
from .core.budget import LocalBudgetLedger
from .agents.base_agent import Agent, AgentVariant

__all__ = [
    "ParticipantStub",
    "Session",
    "SessionConfig",
    "SessionManager",
    "AgentHub",
    "AgentTask",
    "TaskStatus",
    "LocalBudgetLedger",
    "Agent",
    "AgentVariant",
]
