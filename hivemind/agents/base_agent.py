"""
Agent Implementation for HiveMind Workspace

Agents share one data structure. What differs between the built-in
agents is static metadata and the executor they are given, looked up
from a variant table rather than through subclassing.
"""

import uuid
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class MessageRole(Enum):
    """Conversation roles."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass
class AgentMessage:
    role: MessageRole
    content: str
    timestamp: datetime


class AgentVariant(Enum):
    """Built-in agent kinds."""
    ARCHITECT = "architect"
    DEVILS_ADVOCATE = "devils_advocate"
    HISTORIAN = "historian"
    SCRIBE = "scribe"
    CUSTOM = "custom"


Executor = Callable[["Agent", str], Awaitable[str]]


def labeled_echo(label: str) -> Executor:
    """
    Executor that records the input and answers with a labeled echo.

    Stands in for a provider call until real integrations exist.
    """
    async def execute(agent: "Agent", input_text: str) -> str:
        agent.add_to_history(AgentMessage(MessageRole.USER, input_text, agent.now()))
        response = f"[{label}]\n{input_text}"
        agent.add_to_history(AgentMessage(MessageRole.ASSISTANT, response, agent.now()))
        return response

    return execute


class Agent:
    """
    A named, model-backed unit of work with conversation history.

    `id` is fixed at construction. History grows through
    add_to_history and is only replaced by clear_history.
    """

    def __init__(self, name: str, provider: str, model: str,
                 system_prompt: str = "",
                 executor: Optional[Executor] = None,
                 variant: AgentVariant = AgentVariant.CUSTOM,
                 agent_id: Optional[str] = None,
                 max_tokens: Optional[int] = None,
                 temperature: Optional[float] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize an agent.

        Args:
            name: Human-readable name, used for named dispatch
            provider: Model provider (anthropic, openai, ...)
            model: Provider model name
            system_prompt: Prompt describing the agent's role
            executor: Coroutine function doing the actual work
            variant: Built-in kind, CUSTOM for user-defined agents
            agent_id: Explicit id; a uuid4 is used when omitted
            max_tokens: Optional response size limit for provider calls
            temperature: Optional sampling temperature for provider calls
            clock: Timestamp source for history messages
        """
        self._id = agent_id or str(uuid.uuid4())
        self.name = name
        self.provider = provider
        self.model = model
        self.system_prompt = system_prompt
        self.variant = variant
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._executor = executor or labeled_echo(name)
        self._clock = clock or datetime.now
        self._history: List[AgentMessage] = []

    @property
    def id(self) -> str:
        return self._id

    def now(self) -> datetime:
        return self._clock()

    async def execute(self, input_text: str) -> str:
        """Run the agent's executor on `input_text` and return its output."""
        return await self._executor(self, input_text)

    def add_to_history(self, message: AgentMessage) -> None:
        self._history.append(message)

    def get_history(self) -> List[AgentMessage]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history = []

    def get_context(self) -> str:
        """Render history as ``role: content`` lines for a provider prompt."""
        return "\n".join(f"{m.role.value}: {m.content}" for m in self._history)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider,
            "model": self.model,
            "variant": self.variant.value,
            "history_length": len(self._history),
        }

    def __repr__(self) -> str:
        return f"Agent(id={self.id!r}, name={self.name!r}, variant={self.variant.value})"


@dataclass(frozen=True)
class AgentProfile:
    """Static metadata for a built-in agent."""
    name: str
    provider: str
    model: str
    system_prompt: str
    label: str


BUILTIN_PROFILES: Dict[AgentVariant, AgentProfile] = {
    AgentVariant.ARCHITECT: AgentProfile(
        name="The Architect",
        provider="anthropic",
        model="claude-3-5-sonnet",
        system_prompt=(
            "You are The Architect, a senior software architect.\n"
            "Your role is to maintain the big picture of the codebase.\n"
            "You prevent spaghetti code by suggesting proper structure.\n"
            "You review code for architectural patterns and best practices."
        ),
        label="Architect Analysis",
    ),
    AgentVariant.DEVILS_ADVOCATE: AgentProfile(
        name="The Devil's Advocate",
        provider="openai",
        model="gpt-4o",
        system_prompt=(
            "You are The Devil's Advocate, a chaos engineer.\n"
            "Your role is to actively try to break code logic.\n"
            "You look for edge cases, race conditions, and potential failures.\n"
            "You challenge assumptions and find weaknesses."
        ),
        label="Chaos Analysis",
    ),
    AgentVariant.HISTORIAN: AgentProfile(
        name="The Historian",
        provider="google",
        model="gemini-pro-1.5",
        system_prompt=(
            "You are The Historian, the keeper of context.\n"
            "You remember every git commit and chat message.\n"
            'You answer "Why did we do this?" questions.\n'
            "You provide historical context for decisions."
        ),
        label="Historical Context",
    ),
    AgentVariant.SCRIBE: AgentProfile(
        name="The Scribe",
        provider="mistral",
        model="mistral-small",
        system_prompt=(
            "You are The Scribe, the documentation specialist.\n"
            "You update README and comments in real-time.\n"
            "You ensure code is well-documented and accessible.\n"
            "You write clear, concise documentation."
        ),
        label="Documentation",
    ),
}


def create_agent(variant: AgentVariant, agent_id: Optional[str] = None,
                 executor: Optional[Executor] = None,
                 clock: Optional[Callable[[], datetime]] = None) -> Agent:
    """Build a built-in agent from its profile."""
    if variant not in BUILTIN_PROFILES:
        raise ValueError(f"No built-in profile for variant {variant.value}")

    profile = BUILTIN_PROFILES[variant]
    return Agent(
        name=profile.name,
        provider=profile.provider,
        model=profile.model,
        system_prompt=profile.system_prompt,
        executor=executor or labeled_echo(profile.label),
        variant=variant,
        agent_id=agent_id,
        clock=clock,
    )


def default_agents(id_factory: Optional[Callable[[], str]] = None,
                   clock: Optional[Callable[[], datetime]] = None) -> List[Agent]:
    """The four built-in agents, in registration order."""
    return [
        create_agent(variant, agent_id=id_factory() if id_factory else None, clock=clock)
        for variant in BUILTIN_PROFILES
    ]
