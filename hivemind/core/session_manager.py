"""
Session Manager for HiveMind Workspace

Manages multiplayer sessions: the participant registry of each session,
its handle on the sync engine, and the budget gate shared with the
Agent Hub.
"""

import random
import threading
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from .budget import BudgetLedger
from .errors import SessionClosedError, SessionIdExhaustedError, SessionNotFoundError
from .participant import Participant, palette_color
from .sync import CursorTracker, SyncEngine

logger = logging.getLogger(__name__)

DEFAULT_BUDGET = 5.00
DEFAULT_INVITE_BASE_URL = "hivemind.io"

SESSION_ADJECTIVES = ["cool", "epic", "awesome", "blazing", "stellar"]
SESSION_NOUNS = ["project", "code", "hack", "build", "venture"]

SyncEngineFactory = Callable[[str], SyncEngine]


class SessionConfig(BaseModel):
    """Parameters for creating a session."""
    name: str
    host_id: str
    allow_guests: bool = True
    budget: Optional[float] = None
    host_username: str = "Host"


class ParticipantStub(BaseModel):
    """Identity a guest supplies when joining a session."""
    id: str
    username: str
    color: str = ""


def generate_session_id(rng: Optional[random.Random] = None) -> str:
    """
    Build a human-memorable session label such as ``epic-hack-42``.

    Labels are not unique on their own; SessionManager checks them
    against its registry.
    """
    rng = rng or random.Random()
    adjective = rng.choice(SESSION_ADJECTIVES)
    noun = rng.choice(SESSION_NOUNS)
    number = rng.randrange(1000)
    return f"{adjective}-{noun}-{number}"


class Session:
    """
    A collaborative workspace with a host, participants and a budget.

    The participant map and the sync engine handle are owned by the
    session. The budget ledger is shared and only consulted, never
    enforced here.
    """

    def __init__(self, config: SessionConfig, ledger: BudgetLedger,
                 session_id: Optional[str] = None,
                 sync_engine_factory: Optional[SyncEngineFactory] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 rng: Optional[random.Random] = None,
                 invite_base_url: str = DEFAULT_INVITE_BASE_URL):
        """
        Initialize a session and enrol its host.

        Args:
            config: Session parameters
            ledger: Budget ledger shared with other consumers of the account
            session_id: Explicit id; generated when omitted
            sync_engine_factory: Builds the sync engine from the host id
            clock: Timestamp source
            rng: Random source for id generation
            invite_base_url: Host part of invite links
        """
        self.id = session_id or generate_session_id(rng)
        self.name = config.name
        self.host_id = config.host_id
        self.allow_guests = config.allow_guests
        self.budget = config.budget or DEFAULT_BUDGET
        self.invite_base_url = invite_base_url

        self._ledger = ledger
        self._clock = clock or datetime.now
        self._sync_engine = (sync_engine_factory or CursorTracker)(config.host_id)
        self._participants: Dict[str, Participant] = {}
        self._is_active = True
        self._lock = threading.RLock()

        now = self._clock()
        self.add_participant(Participant(
            id=config.host_id,
            username=config.host_username,
            is_host=True,
            joined_at=now,
            last_seen=now,
        ))

    @property
    def is_active(self) -> bool:
        return self._is_active

    def get_invite_link(self) -> str:
        return f"{self.invite_base_url}/join/{self.id}"

    def add_participant(self, participant: Participant) -> None:
        """
        Insert or replace a participant by id.

        A participant without a color gets the palette entry at the
        current participant count, so removals shift later assignments.
        """
        with self._lock:
            if not self._is_active:
                raise SessionClosedError(self.id)

            if not participant.color:
                participant.color = palette_color(len(self._participants))
            self._participants[participant.id] = participant

        logger.info(f"Participant {participant.id} ({participant.username}) joined session {self.id}")

    def remove_participant(self, participant_id: str) -> None:
        """Remove a participant and drop their cursor. Unknown ids are ignored."""
        with self._lock:
            removed = self._participants.pop(participant_id, None)
            if removed is None:
                return
            self._sync_engine.remove_cursor(participant_id)

        logger.info(f"Participant {participant_id} left session {self.id}")

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        with self._lock:
            return self._participants.get(participant_id)

    def get_participants(self) -> List[Participant]:
        with self._lock:
            return list(self._participants.values())

    def touch_participant(self, participant_id: str) -> bool:
        """Refresh a participant's last_seen timestamp."""
        with self._lock:
            participant = self._participants.get(participant_id)
            if participant is None:
                return False
            participant.touch(self._clock())
            return True

    def is_host(self, user_id: str) -> bool:
        return self.host_id == user_id

    def get_sync_engine(self) -> SyncEngine:
        return self._sync_engine

    def get_budget_remaining(self) -> float:
        return self._ledger.get_budget_remaining()

    def record_ai_usage(self, cost: float) -> bool:
        """
        Record AI spend against the shared ledger.

        Returns:
            True if the ledger accepted the spend. Callers must not treat
            work as billed when this is False.
        """
        accepted = self._ledger.record_spend(cost)
        if not accepted:
            logger.warning(f"Session {self.id}: AI usage of {cost} rejected by ledger")
        return accepted

    def end(self) -> None:
        """Deactivate the session and discard all participants. Safe to repeat."""
        with self._lock:
            was_active = self._is_active
            self._is_active = False
            self._participants.clear()

        if was_active:
            logger.info(f"Session {self.id} ended")

    def get_status(self) -> Dict[str, Any]:
        with self._lock:
            participant_count = len(self._participants)
            is_active = self._is_active

        return {
            "id": self.id,
            "name": self.name,
            "participants": participant_count,
            "budget_remaining": self.get_budget_remaining(),
            "is_active": is_active,
        }


class SessionManager:
    """
    Registry of live sessions.

    Features:
    - Session creation with registry-unique ids
    - Join / leave / end by session id
    - Snapshot listing and basic statistics
    """

    def __init__(self, ledger: BudgetLedger,
                 default_budget: float = DEFAULT_BUDGET,
                 invite_base_url: str = DEFAULT_INVITE_BASE_URL,
                 max_id_attempts: int = 50,
                 sync_engine_factory: Optional[SyncEngineFactory] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize the session manager.

        Args:
            ledger: Budget ledger handed to every session
            default_budget: Budget used when a config omits one
            invite_base_url: Host part of invite links
            max_id_attempts: Id generation attempts before giving up
            sync_engine_factory: Builds each session's sync engine
            clock: Timestamp source
            rng: Random source for session ids
        """
        self.ledger = ledger
        self.default_budget = default_budget
        self.invite_base_url = invite_base_url
        self.max_id_attempts = max_id_attempts
        self._sync_engine_factory = sync_engine_factory
        self._clock = clock or datetime.now
        self._rng = rng or random.Random()
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.RLock()

    def _next_session_id(self) -> str:
        for _ in range(self.max_id_attempts):
            session_id = generate_session_id(self._rng)
            if session_id not in self._sessions:
                return session_id
        raise SessionIdExhaustedError(
            f"No free session id after {self.max_id_attempts} attempts",
            {"active_sessions": len(self._sessions)},
        )

    def create_session(self, config: SessionConfig) -> Session:
        """Create a session, enrol its host and register it."""
        if not config.budget:
            config = config.model_copy(update={"budget": self.default_budget})

        with self._lock:
            session = Session(
                config,
                self.ledger,
                session_id=self._next_session_id(),
                sync_engine_factory=self._sync_engine_factory,
                clock=self._clock,
                invite_base_url=self.invite_base_url,
            )
            self._sessions[session.id] = session

        logger.info(f"Created session {session.id} ({session.name}) hosted by {session.host_id}")
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def join_session(self, session_id: str, stub: ParticipantStub) -> Session:
        """
        Add a guest participant to a session.

        Args:
            session_id: Session to join
            stub: Identity supplied by the guest; host flag and timestamps
                are filled in here

        Returns:
            The joined session

        Raises:
            SessionNotFoundError: If the session id is unknown
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        now = self._clock()
        session.add_participant(Participant(
            id=stub.id,
            username=stub.username,
            color=stub.color,
            is_host=False,
            joined_at=now,
            last_seen=now,
        ))
        return session

    def leave_session(self, session_id: str, participant_id: str) -> None:
        session = self.get_session(session_id)
        if session is None:
            logger.debug(f"Ignoring leave for unknown session {session_id}")
            return
        session.remove_participant(participant_id)

    def end_session(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            logger.debug(f"Ignoring end for unknown session {session_id}")
            return
        session.end()

    def list_sessions(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    def get_stats(self) -> Dict[str, Any]:
        sessions = self.list_sessions()
        return {
            "total_sessions": len(sessions),
            "total_participants": sum(len(s.get_participants()) for s in sessions),
            "budget_remaining": self.ledger.get_budget_remaining(),
        }
