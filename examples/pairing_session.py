#!/usr/bin/env python3
"""
Pairing Session Example for HiveMind Workspace

Creates a session, lets a guest join, and asks the built-in agents for
help while charging AI usage to the shared budget.
"""

import asyncio
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hivemind.core.agent_hub import AgentHub, TaskStatus
from hivemind.core.budget import LocalBudgetLedger
from hivemind.core.session_manager import ParticipantStub, SessionConfig, SessionManager

COST_PER_CALL = 0.05

async def main():
    """Run a short pairing session."""

    print("🐝 Starting Pairing Session Example")
    print("=" * 50)

    ledger = LocalBudgetLedger(initial_budget=0.20)
    sessions = SessionManager(ledger)
    hub = AgentHub(ledger=ledger)

    session = sessions.create_session(SessionConfig(name="Refactor night", host_id="alice"))
    sessions.join_session(session.id, ParticipantStub(id="bob", username="bob"))
    print(f"✓ Session {session.id} ready, invite: {session.get_invite_link()}")

    architect = hub.get_agent_by_name("The Architect")
    prompts = [
        "How should we split the storage layer?",
        "Is the cache a separate service?",
        "What owns the retry policy?",
        "Where do metrics live?",
        "Should config be global?",
    ]

    for prompt in prompts:
        if not session.record_ai_usage(COST_PER_CALL):
            print(f"✗ Budget exhausted, skipping: {prompt}")
            continue

        task = await hub.submit_task(architect.id, prompt)
        if task.status is TaskStatus.COMPLETED:
            print(f"✓ {task.result.splitlines()[-1]}")
        else:
            print(f"✗ Task {task.id} failed: {task.error}")

    print("\n📊 Session status:", session.get_status())
    sessions.end_session(session.id)
    print("✅ Session ended")

if __name__ == "__main__":
    asyncio.run(main())
