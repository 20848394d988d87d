#!/usr/bin/env python3
"""
Monitoring dashboard tests for HiveMind Workspace.
"""

import asyncio

from fastapi.testclient import TestClient

from hivemind.agents.base_agent import Agent
from hivemind.core.agent_hub import AgentHub
from hivemind.core.budget import LocalBudgetLedger
from hivemind.core.errors import AgentExecutionError
from hivemind.core.session_manager import ParticipantStub, SessionConfig, SessionManager
from hivemind.monitoring.dashboard import MonitoringDashboard


async def broken(agent, input_text):
    raise AgentExecutionError("quota exceeded")


def build_dashboard(budget=5.00):
    ledger = LocalBudgetLedger(budget)
    manager = SessionManager(ledger)
    hub = AgentHub(ledger=ledger, load_default_agents=False)
    hub.register_agent(Agent(name="Helper", provider="local", model="none", agent_id="a1"))
    hub.register_agent(Agent(name="Broken", provider="local", model="none",
                             agent_id="b1", executor=broken))
    return MonitoringDashboard(manager, hub), manager, hub


def test_status_endpoint():
    dashboard, manager, hub = build_dashboard()
    manager.create_session(SessionConfig(name="Jam", host_id="h1"))
    client = TestClient(dashboard.app)

    response = client.get("/api/status")
    assert response.status_code == 200
    data = response.json()
    assert data["sessions"]["total_sessions"] == 1
    assert data["agents"]["total_agents"] == 2


def test_session_endpoints():
    dashboard, manager, hub = build_dashboard()
    session = manager.create_session(SessionConfig(name="Jam", host_id="h1"))
    manager.join_session(session.id, ParticipantStub(id="g1", username="guest"))
    client = TestClient(dashboard.app)

    listing = client.get("/api/sessions").json()
    assert [s["id"] for s in listing] == [session.id]

    detail = client.get(f"/api/sessions/{session.id}").json()
    assert detail["invite_link"] == f"hivemind.io/join/{session.id}"
    assert {p["id"] for p in detail["participants"]} == {"h1", "g1"}

    assert client.get("/api/sessions/missing").status_code == 404


def test_task_endpoints():
    dashboard, manager, hub = build_dashboard()

    async def scenario():
        ok = await hub.submit_task("a1", "hello")
        bad = await hub.submit_task("b1", "hello")
        return ok, bad

    ok, bad = asyncio.run(scenario())
    client = TestClient(dashboard.app)

    assert client.get(f"/api/tasks/{ok.id}").json()["status"] == "completed"
    failed = client.get("/api/tasks", params={"status": "failed"}).json()
    assert [t["id"] for t in failed] == [bad.id]
    assert failed[0]["error"] == "quota exceeded"

    assert client.get("/api/tasks", params={"status": "bogus"}).status_code == 400
    assert client.get("/api/tasks/missing").status_code == 404

    agent_tasks = client.get("/api/agents/a1/tasks").json()
    assert [t["input"] for t in agent_tasks] == ["hello"]
    assert client.get("/api/agents/nobody/tasks").status_code == 404


def test_budget_alerts():
    dashboard, manager, hub = build_dashboard(budget=1.00)
    client = TestClient(dashboard.app)

    assert not dashboard.check_budget()
    assert client.get("/api/alerts").json() == []

    manager.ledger.record_spend(0.75)
    assert dashboard.check_budget()

    alerts = client.get("/api/alerts").json()
    assert len(alerts) == 1
    assert alerts[0]["source"] == "budget"
    assert client.get("/api/budget").json() == {"budget_remaining": 0.25}
