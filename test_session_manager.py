#!/usr/bin/env python3
"""
Session and Session Manager tests for HiveMind Workspace.
"""

import random
from datetime import datetime, timedelta

import pytest

from hivemind.core.budget import LocalBudgetLedger
from hivemind.core.errors import SessionClosedError, SessionNotFoundError, SessionIdExhaustedError
from hivemind.core.participant import COLOR_PALETTE, Participant
from hivemind.core.session_manager import (
    ParticipantStub, Session, SessionConfig, SessionManager, generate_session_id,
    SESSION_ADJECTIVES, SESSION_NOUNS,
)


class StepClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self):
        self.current = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current


class RecordingSyncEngine:
    def __init__(self, host_id):
        self.host_id = host_id
        self.removed = []

    def remove_cursor(self, participant_id):
        self.removed.append(participant_id)


def make_session(ledger=None, **kwargs):
    return Session(
        SessionConfig(name="Test", host_id="host"),
        ledger or LocalBudgetLedger(5.00),
        sync_engine_factory=RecordingSyncEngine,
        clock=StepClock(),
        rng=random.Random(7),
        **kwargs
    )


def test_session_id_format():
    """Session ids look like adjective-noun-number."""
    rng = random.Random(1)
    for _ in range(50):
        adjective, noun, number = generate_session_id(rng).split("-")
        assert adjective in SESSION_ADJECTIVES
        assert noun in SESSION_NOUNS
        assert 0 <= int(number) < 1000


def test_host_enrolled_on_creation():
    session = make_session()

    host = session.get_participant("host")
    assert host is not None
    assert host.is_host
    assert host.color == COLOR_PALETTE[0]
    assert session.is_host("host")
    assert not session.is_host("guest")
    assert session.get_sync_engine().host_id == "host"


def test_palette_follows_participant_count():
    """The Nth participant added without a color gets palette[N mod 8]."""
    session = make_session()

    for n in range(1, 12):
        participant = Participant(id=f"p{n}", username=f"user{n}")
        session.add_participant(participant)
        assert participant.color == COLOR_PALETTE[n % 8]


def test_palette_uses_count_not_counter():
    session = make_session()
    session.add_participant(Participant(id="a", username="a"))
    session.remove_participant("a")

    late = Participant(id="b", username="b")
    session.add_participant(late)
    assert late.color == COLOR_PALETTE[1]


def test_explicit_color_kept():
    session = make_session()
    participant = Participant(id="a", username="a", color="#000000")
    session.add_participant(participant)
    assert session.get_participant("a").color == "#000000"


def test_add_participant_overwrites_by_id():
    session = make_session()
    session.add_participant(Participant(id="a", username="first"))
    session.add_participant(Participant(id="a", username="second"))

    assert len(session.get_participants()) == 2
    assert session.get_participant("a").username == "second"


def test_remove_participant_drops_cursor_once():
    session = make_session()
    session.add_participant(Participant(id="guest", username="guest"))

    session.remove_participant("guest")

    assert session.get_participant("guest") is None
    assert session.get_sync_engine().removed == ["guest"]


def test_remove_absent_participant_is_noop():
    session = make_session()
    session.remove_participant("nobody")

    assert session.get_sync_engine().removed == []
    assert len(session.get_participants()) == 1


def test_participants_are_a_snapshot():
    session = make_session()
    snapshot = session.get_participants()
    session.add_participant(Participant(id="late", username="late"))

    assert len(snapshot) == 1
    assert len(session.get_participants()) == 2


def test_invite_link():
    session = make_session(session_id="epic-hack-42")
    assert session.get_invite_link() == "hivemind.io/join/epic-hack-42"

    custom = make_session(session_id="cool-code-7", invite_base_url="https://example.test")
    assert custom.get_invite_link() == "https://example.test/join/cool-code-7"


def test_end_is_idempotent():
    session = make_session()
    session.add_participant(Participant(id="guest", username="guest"))

    session.end()
    assert not session.is_active
    assert session.get_participants() == []

    session.end()
    assert not session.is_active
    assert session.get_participants() == []


def test_ended_session_rejects_participants():
    session = make_session()
    session.end()

    with pytest.raises(SessionClosedError):
        session.add_participant(Participant(id="late", username="late"))


def test_touch_participant_updates_last_seen():
    session = make_session()
    before = session.get_participant("host").last_seen

    assert session.touch_participant("host")
    assert session.get_participant("host").last_seen > before
    assert not session.touch_participant("nobody")


def test_budget_gate_passes_through():
    ledger = LocalBudgetLedger(1.00)
    session = make_session(ledger=ledger)

    assert session.record_ai_usage(0.40)
    assert session.get_budget_remaining() == pytest.approx(0.60)

    assert not session.record_ai_usage(0.75)
    assert session.get_budget_remaining() == pytest.approx(0.60)


def test_status_projection():
    session = make_session(session_id="stellar-build-1")
    status = session.get_status()

    assert status == {
        "id": "stellar-build-1",
        "name": "Test",
        "participants": 1,
        "budget_remaining": 5.00,
        "is_active": True,
    }


def test_create_session_defaults_budget():
    ledger = LocalBudgetLedger(5.00)
    manager = SessionManager(ledger, rng=random.Random(3))

    session = manager.create_session(SessionConfig(name="Jam", host_id="h1"))

    assert session.budget == 5.00
    assert session.get_budget_remaining() == 5.00
    assert manager.get_session(session.id) is session
    assert session.get_participant("h1").is_host


def test_create_session_zero_budget_uses_default():
    manager = SessionManager(LocalBudgetLedger(5.00), default_budget=2.50)
    session = manager.create_session(SessionConfig(name="Jam", host_id="h1", budget=0))
    assert session.budget == 2.50


def test_create_session_explicit_budget():
    manager = SessionManager(LocalBudgetLedger(5.00))
    session = manager.create_session(SessionConfig(name="Jam", host_id="h1", budget=12.0))
    assert session.budget == 12.0


def test_session_ids_unique_within_manager():
    manager = SessionManager(LocalBudgetLedger(5.00), rng=random.Random(11))
    ids = {manager.create_session(SessionConfig(name=f"s{i}", host_id="h")).id
           for i in range(200)}
    assert len(ids) == 200


def test_session_id_exhaustion():
    class FixedRandom(random.Random):
        def choice(self, seq):
            return seq[0]

        def randrange(self, *args):
            return 0

    manager = SessionManager(LocalBudgetLedger(5.00), max_id_attempts=3, rng=FixedRandom())
    manager.create_session(SessionConfig(name="first", host_id="h"))

    with pytest.raises(SessionIdExhaustedError):
        manager.create_session(SessionConfig(name="second", host_id="h"))
    assert len(manager.list_sessions()) == 1


def test_join_session():
    clock = StepClock()
    manager = SessionManager(LocalBudgetLedger(5.00), clock=clock)
    session = manager.create_session(SessionConfig(name="Jam", host_id="h1"))

    joined = manager.join_session(session.id, ParticipantStub(id="g1", username="guest"))

    assert joined is session
    guest = session.get_participant("g1")
    assert not guest.is_host
    assert guest.username == "guest"
    assert guest.color == COLOR_PALETTE[1]
    assert guest.joined_at == guest.last_seen


def test_join_session_builds_guest_from_stub():
    manager = SessionManager(LocalBudgetLedger(5.00), clock=StepClock())
    session = manager.create_session(SessionConfig(name="Jam", host_id="h1"))
    stub = ParticipantStub(id="g1", username="guest", color="#123456")

    manager.join_session(session.id, stub)

    guest = session.get_participant("g1")
    assert isinstance(guest, Participant)
    assert guest is not stub
    assert guest.color == "#123456"
    assert not guest.is_host
    assert guest.joined_at is not None
    assert stub.model_dump() == {"id": "g1", "username": "guest", "color": "#123456"}


def test_join_unknown_session_raises():
    manager = SessionManager(LocalBudgetLedger(5.00))
    session = manager.create_session(SessionConfig(name="Jam", host_id="h1"))

    with pytest.raises(SessionNotFoundError):
        manager.join_session("unknown-id", ParticipantStub(id="g1", username="guest"))

    assert len(session.get_participants()) == 1


def test_leave_session():
    manager = SessionManager(LocalBudgetLedger(5.00))
    session = manager.create_session(SessionConfig(name="Jam", host_id="h1"))
    manager.join_session(session.id, ParticipantStub(id="g1", username="guest"))

    manager.leave_session(session.id, "g1")
    assert session.get_participant("g1") is None

    # Unknown session is ignored
    manager.leave_session("missing", "g1")


def test_end_session():
    manager = SessionManager(LocalBudgetLedger(5.00))
    session = manager.create_session(SessionConfig(name="Jam", host_id="h1"))

    manager.end_session(session.id)

    assert manager.get_session(session.id) is None
    assert not session.is_active
    assert session.get_participants() == []
    manager.end_session(session.id)


def test_list_sessions_and_stats():
    manager = SessionManager(LocalBudgetLedger(5.00))
    first = manager.create_session(SessionConfig(name="a", host_id="h1"))
    manager.create_session(SessionConfig(name="b", host_id="h2"))
    manager.join_session(first.id, ParticipantStub(id="g1", username="guest"))

    assert len(manager.list_sessions()) == 2

    stats = manager.get_stats()
    assert stats["total_sessions"] == 2
    assert stats["total_participants"] == 3
    assert stats["budget_remaining"] == 5.00


def test_sessions_share_ledger():
    ledger = LocalBudgetLedger(1.00)
    manager = SessionManager(ledger)
    first = manager.create_session(SessionConfig(name="a", host_id="h1"))
    second = manager.create_session(SessionConfig(name="b", host_id="h2"))

    assert first.record_ai_usage(0.70)
    assert not second.record_ai_usage(0.70)
    assert second.get_budget_remaining() == pytest.approx(0.30)
