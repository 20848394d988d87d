"""
Monitoring Dashboard for HiveMind Workspace

Read-only HTTP API over sessions, agents, tasks and the shared budget,
plus a background check that raises alerts when the budget runs low.
"""

from fastapi import FastAPI, HTTPException
import asyncio
import logging
from typing import Any, Dict, List, Optional
from datetime import datetime

from ..core.agent_hub import AgentHub, TaskStatus
from ..core.session_manager import SessionManager

logger = logging.getLogger(__name__)

class MonitoringDashboard:
    """
    HTTP monitoring surface for human oversight.

    Features:
    - Session, agent and task inspection
    - Budget status
    - Low-budget alerts
    """

    def __init__(self, session_manager: SessionManager, agent_hub: AgentHub,
                 port: int = 8000, low_budget_threshold: float = 0.5,
                 check_interval: int = 60):
        """
        Initialize monitoring dashboard.

        Args:
            session_manager: Session registry to expose
            agent_hub: Agent hub to expose
            port: Port to run dashboard on
            low_budget_threshold: Remaining budget that triggers an alert
            check_interval: Seconds between background checks
        """
        self.session_manager = session_manager
        self.agent_hub = agent_hub
        self.port = port
        self.low_budget_threshold = low_budget_threshold
        self.check_interval = check_interval

        self.app = FastAPI(title="HiveMind Monitoring Dashboard")
        self._setup_routes()

        self._alerts: List[Dict[str, Any]] = []

    def _setup_routes(self):
        """Setup FastAPI routes."""

        @self.app.get("/api/status")
        async def get_status():
            """Get overall system status."""
            return {
                "timestamp": datetime.now().isoformat(),
                "sessions": self.session_manager.get_stats(),
                "agents": self.agent_hub.get_stats(),
            }

        @self.app.get("/api/budget")
        async def get_budget():
            ledger = self.session_manager.ledger
            return {"budget_remaining": ledger.get_budget_remaining()}

        @self.app.get("/api/sessions")
        async def get_sessions():
            return [s.get_status() for s in self.session_manager.list_sessions()]

        @self.app.get("/api/sessions/{session_id}")
        async def get_session(session_id: str):
            """Get session status with its participants."""
            session = self.session_manager.get_session(session_id)
            if not session:
                raise HTTPException(status_code=404, detail="Session not found")

            status = session.get_status()
            status["invite_link"] = session.get_invite_link()
            status["participants"] = [p.to_dict() for p in session.get_participants()]
            return status

        @self.app.get("/api/agents")
        async def get_agents():
            return [a.to_dict() for a in self.agent_hub.list_agents()]

        @self.app.get("/api/agents/{agent_id}/tasks")
        async def get_agent_tasks(agent_id: str):
            if not self.agent_hub.get_agent(agent_id):
                raise HTTPException(status_code=404, detail="Agent not found")
            return [t.to_dict() for t in self.agent_hub.get_tasks_by_agent(agent_id)]

        @self.app.get("/api/tasks")
        async def get_tasks(status: Optional[str] = None):
            """Get tasks with optional status filtering."""
            status_enum = None
            if status:
                try:
                    status_enum = TaskStatus(status)
                except ValueError:
                    raise HTTPException(status_code=400, detail="Invalid status")

            return [t.to_dict() for t in self.agent_hub.list_tasks(status=status_enum)]

        @self.app.get("/api/tasks/{task_id}")
        async def get_task(task_id: str):
            task = self.agent_hub.get_task(task_id)
            if not task:
                raise HTTPException(status_code=404, detail="Task not found")
            return task.to_dict()

        @self.app.get("/api/alerts")
        async def get_alerts():
            return list(self._alerts)

    def add_alert(self, severity: str, message: str, source: str = "system"):
        """Add a new alert."""
        alert = {
            "id": len(self._alerts) + 1,
            "severity": severity,
            "message": message,
            "source": source,
            "timestamp": datetime.now().isoformat(),
        }
        self._alerts.append(alert)

        if len(self._alerts) > 100:
            self._alerts = self._alerts[-100:]

        logger.warning(f"Alert ({severity}): {message}")

    def check_budget(self) -> bool:
        """Raise an alert if the shared budget is below the threshold."""
        remaining = self.session_manager.ledger.get_budget_remaining()
        if remaining < self.low_budget_threshold:
            self.add_alert("warning", f"Budget low: {remaining:.2f} remaining", source="budget")
            return True
        return False

    async def start_monitoring(self):
        """Run periodic checks until cancelled."""
        logger.info("Starting automated monitoring")

        while True:
            self.check_budget()
            await asyncio.sleep(self.check_interval)

    def run(self):
        """Run the monitoring dashboard."""
        import uvicorn
        logger.info(f"Starting monitoring dashboard on port {self.port}")
        uvicorn.run(self.app, host="0.0.0.0", port=self.port)
