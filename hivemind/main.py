"""
Main Application Entry Point for HiveMind Workspace

Provides command-line interface and main application startup.
"""

import asyncio
import argparse
import sys
import signal
import logging
from pathlib import Path
from typing import Optional

import yaml

from .core.budget import LocalBudgetLedger
from .core.session_manager import SessionManager
from .core.agent_hub import AgentHub
from .monitoring.dashboard import MonitoringDashboard
from .utils.config import load_config, setup_logging, HiveMindConfig

logger = logging.getLogger(__name__)

class HiveMindWorkspace:
    """
    Main application class for HiveMind Workspace.

    Builds the shared budget ledger, the session manager and the agent
    hub from configuration, and runs the monitoring dashboard.
    """

    def __init__(self, config: HiveMindConfig):
        """Initialize the workspace with configuration."""
        self.config = config

        # One ledger shared by sessions and the agent hub
        self.ledger = LocalBudgetLedger(initial_budget=config.budget.initial_budget)

        self.session_manager = SessionManager(
            ledger=self.ledger,
            default_budget=config.sessions.default_budget,
            invite_base_url=config.sessions.invite_base_url,
            max_id_attempts=config.sessions.max_id_attempts,
        )

        self.agent_hub = AgentHub(
            ledger=self.ledger,
            load_default_agents=config.agents.load_default_agents,
        )

        self.monitoring_dashboard = None
        if config.monitoring.enable_monitoring:
            self.monitoring_dashboard = MonitoringDashboard(
                session_manager=self.session_manager,
                agent_hub=self.agent_hub,
                port=config.monitoring.dashboard_port
            )

        self._running = False
        self._tasks = []

    async def start(self):
        """Start the background components."""
        logger.info("Starting HiveMind Workspace")

        if self.monitoring_dashboard:
            self._tasks.append(asyncio.create_task(
                self.monitoring_dashboard.start_monitoring()
            ))
            self._tasks.append(asyncio.create_task(self._run_dashboard()))

        self._running = True
        logger.info("HiveMind Workspace started successfully")
        self._display_startup_info()

    async def stop(self):
        """Stop all components and end every open session."""
        logger.info("Stopping HiveMind Workspace")

        self._running = False

        for task in self._tasks:
            task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        for session in self.session_manager.list_sessions():
            self.session_manager.end_session(session.id)

        logger.info("HiveMind Workspace stopped")

    async def _run_dashboard(self):
        """Run the monitoring dashboard web server."""
        if not self.monitoring_dashboard:
            return

        import uvicorn
        config = uvicorn.Config(
            self.monitoring_dashboard.app,
            host="0.0.0.0",
            port=self.config.monitoring.dashboard_port,
            log_level=self.config.monitoring.log_level.lower()
        )
        server = uvicorn.Server(config)
        await server.serve()

    def _display_startup_info(self):
        """Display startup information to console."""
        print("\n" + "="*60)
        print("HIVEMIND WORKSPACE STARTED")
        print("="*60)
        print(f"Environment: {self.config.environment}")
        print(f"Data Directory: {self.config.data_dir}")

        if self.monitoring_dashboard:
            print(f"Dashboard: http://localhost:{self.config.monitoring.dashboard_port}/api/status")

        print(f"Log Level: {self.config.monitoring.log_level}")
        print(f"Budget: {self.ledger.get_budget_remaining():.2f}")
        print("\nAgents:")
        for agent in self.agent_hub.list_agents():
            print(f"  - {agent.name} ({agent.provider}/{agent.model})")
        print("="*60 + "\n")

    def get_status(self):
        """Get current workspace status."""
        return {
            "running": self._running,
            "config": self.config.model_dump(),
            "sessions": self.session_manager.get_stats(),
            "agents": self.agent_hub.get_stats(),
        }

def create_sample_config():
    """Create a sample configuration file."""
    config = HiveMindConfig()

    config_path = Path("hivemind_config.yaml")

    with open(config_path, 'w') as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, indent=2)

    print(f"Sample configuration created: {config_path}")
    return config_path

async def run_workspace(config_path: Optional[str] = None,
                       env_file: Optional[str] = None):
    """Run the HiveMind Workspace."""

    config = load_config(config_path, env_file)
    setup_logging(config)

    workspace = HiveMindWorkspace(config)

    def signal_handler():
        logger.info("Received shutdown signal")
        workspace._running = False

    for sig in [signal.SIGINT, signal.SIGTERM]:
        try:
            asyncio.get_running_loop().add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Signal handlers not supported on Windows
            pass

    try:
        await workspace.start()

        while workspace._running:
            await asyncio.sleep(1)

    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        await workspace.stop()

def main():
    """Main entry point with command-line interface."""
    parser = argparse.ArgumentParser(
        description="HiveMind Workspace - Collaborative sessions with AI agents"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    start_parser = subparsers.add_parser('start', help='Start the HiveMind Workspace')
    start_parser.add_argument('--config', '-c', help='Configuration file path')
    start_parser.add_argument('--env', '-e', help='Environment file path')

    config_parser = subparsers.add_parser('config', help='Configuration management')
    config_parser.add_argument('--create-sample', action='store_true',
                              help='Create sample configuration file')

    args = parser.parse_args()

    if args.command == 'start':
        try:
            asyncio.run(run_workspace(args.config, args.env))
        except KeyboardInterrupt:
            print("\nShutdown complete.")
        except Exception as e:
            print(f"Failed to start workspace: {e}")
            sys.exit(1)

    elif args.command == 'config':
        if args.create_sample:
            create_sample_config()
        else:
            config_parser.print_help()

    else:
        parser.print_help()

if __name__ == "__main__":
    main()
