"""
Agent Hub for HiveMind Workspace

Owns the agent registry and the task registry, and dispatches input to
agents. Every dispatch is recorded as a task that stays queryable after
it completes or fails.
"""

import asyncio
import threading
import uuid
import weakref
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from ..agents.base_agent import Agent, AgentVariant, BUILTIN_PROFILES, default_agents
from .budget import BudgetLedger
from .errors import AgentNotFoundError, HiveMindError

logger = logging.getLogger(__name__)


class TaskStatus(Enum):
    """Task status enumeration."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class AgentTask:
    """One dispatch of input to an agent."""
    id: str
    agent_id: str
    input: str
    status: TaskStatus = TaskStatus.PENDING
    result: Optional[str] = None
    error: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)

    @property
    def duration(self) -> Optional[float]:
        if self.start_time is None or self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "agent_id": self.agent_id,
            "input": self.input,
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration": self.duration,
        }


class AgentHub:
    """
    Registry and dispatcher for agents.

    Features:
    - Agent registration, lookup by id or name
    - Task submission with a pending -> running -> completed/failed lifecycle
    - One in-flight execution per agent, later submissions wait in order
    - Named shortcuts for the built-in agents
    - Task history and statistics
    """

    def __init__(self, ledger: Optional[BudgetLedger] = None,
                 load_default_agents: bool = True,
                 id_factory: Optional[Callable[[], str]] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the hub.

        Args:
            ledger: Budget ledger shared with sessions on the same account
            load_default_agents: Register the four built-in agents
            id_factory: Source of task ids (uuid4 strings by default)
            clock: Timestamp source
        """
        self.ledger = ledger
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._clock = clock or datetime.now
        self._agents: Dict[str, Agent] = {}
        self._tasks: Dict[str, AgentTask] = {}
        # Execution slots per event loop, then per agent id
        self._agent_slots = weakref.WeakKeyDictionary()
        self._lock = threading.RLock()

        if load_default_agents:
            for agent in default_agents(clock=self._clock):
                self.register_agent(agent)

    # Agent registry

    def register_agent(self, agent: Agent) -> None:
        """Register an agent, replacing any agent with the same id."""
        with self._lock:
            self._agents[agent.id] = agent
        logger.info(f"Registered agent: {agent.id} ({agent.name})")

    def unregister_agent(self, agent_id: str) -> None:
        with self._lock:
            agent = self._agents.pop(agent_id, None)
        if agent is not None:
            logger.info(f"Unregistered agent: {agent_id} ({agent.name})")

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        with self._lock:
            return self._agents.get(agent_id)

    def get_agent_by_name(self, name: str) -> Optional[Agent]:
        with self._lock:
            for agent in self._agents.values():
                if agent.name == name:
                    return agent
        return None

    def list_agents(self) -> List[Agent]:
        with self._lock:
            return list(self._agents.values())

    # Dispatch

    def _slot_for(self, agent_id: str) -> asyncio.Lock:
        """
        Execution slot for `agent_id` on the running loop.

        Slots outlive unregistration so a re-registered id still waits
        for work already in flight under that id.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            loop_slots = self._agent_slots.get(loop)
            if loop_slots is None:
                loop_slots = {}
                self._agent_slots[loop] = loop_slots
            slot = loop_slots.get(agent_id)
            if slot is None:
                slot = asyncio.Lock()
                loop_slots[agent_id] = slot
            return slot

    @asynccontextmanager
    async def _exclusive(self, agent: Agent) -> AsyncIterator[None]:
        """Hold the agent's execution slot. Waiters are served in arrival order."""
        async with self._slot_for(agent.id):
            yield

    def _open_task(self, agent_id: str, input_text: str) -> AgentTask:
        with self._lock:
            task_id = self._id_factory()
            if task_id in self._tasks:
                raise HiveMindError(f"Task id {task_id} already used", {"task_id": task_id})

            task = AgentTask(
                id=task_id,
                agent_id=agent_id,
                input=input_text,
                status=TaskStatus.PENDING,
                start_time=self._clock(),
            )
            self._tasks[task.id] = task
        return task

    async def submit_task(self, agent_id: str, input_text: str) -> AgentTask:
        """
        Dispatch input to an agent and record the outcome.

        Args:
            agent_id: Registered agent to run
            input_text: Input passed to the agent

        Returns:
            The finished task. Agent failures are reported on the task
            (status FAILED with an error message), not raised.

        Raises:
            AgentNotFoundError: If no agent has this id; no task is created
        """
        agent = self.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)

        task = self._open_task(agent_id, input_text)
        logger.debug(f"Task {task.id} queued for agent {agent_id}")

        try:
            async with self._exclusive(agent):
                task.status = TaskStatus.RUNNING
                try:
                    task.result = await agent.execute(input_text)
                    task.status = TaskStatus.COMPLETED
                except Exception as e:
                    task.status = TaskStatus.FAILED
                    task.error = str(e) or type(e).__name__
        except BaseException as e:
            # Interrupted while queued or running; the task still ends FAILED
            task.status = TaskStatus.FAILED
            if isinstance(e, asyncio.CancelledError):
                task.error = "cancelled"
            else:
                task.error = str(e) or type(e).__name__
            raise
        finally:
            task.end_time = self._clock()

        if task.status is TaskStatus.COMPLETED:
            logger.info(f"Task {task.id} completed by agent {agent_id}")
        elif task.status is TaskStatus.FAILED:
            logger.error(f"Task {task.id} failed on agent {agent_id}: {task.error}")
        return task

    async def _dispatch_named(self, variant: AgentVariant, input_text: str) -> str:
        name = BUILTIN_PROFILES[variant].name
        agent = self.get_agent_by_name(name)
        if agent is None:
            raise AgentNotFoundError(name)

        async with self._exclusive(agent):
            return await agent.execute(input_text)

    async def ask_architect(self, question: str) -> str:
        return await self._dispatch_named(AgentVariant.ARCHITECT, question)

    async def challenge_code(self, code: str) -> str:
        return await self._dispatch_named(AgentVariant.DEVILS_ADVOCATE, code)

    async def get_history(self, query: str) -> str:
        """Ask The Historian for context on `query`."""
        return await self._dispatch_named(AgentVariant.HISTORIAN, query)

    async def document_code(self, code: str) -> str:
        return await self._dispatch_named(AgentVariant.SCRIBE, code)

    # Task registry

    def get_task(self, task_id: str) -> Optional[AgentTask]:
        with self._lock:
            return self._tasks.get(task_id)

    def get_tasks_by_agent(self, agent_id: str) -> List[AgentTask]:
        with self._lock:
            return [t for t in self._tasks.values() if t.agent_id == agent_id]

    def list_tasks(self, status: Optional[TaskStatus] = None) -> List[AgentTask]:
        with self._lock:
            tasks = list(self._tasks.values())
        if status is not None:
            tasks = [t for t in tasks if t.status is status]
        return tasks

    def get_stats(self) -> Dict[str, Any]:
        """Agent and task counts for monitoring."""
        with self._lock:
            tasks = list(self._tasks.values())
            agent_count = len(self._agents)

        status_counts = {status.value: 0 for status in TaskStatus}
        for task in tasks:
            status_counts[task.status.value] += 1

        return {
            "total_agents": agent_count,
            "total_tasks": len(tasks),
            "status_counts": status_counts,
            "budget_remaining": self.ledger.get_budget_remaining() if self.ledger else None,
        }
