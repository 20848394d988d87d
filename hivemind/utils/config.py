"""
Configuration Management for HiveMind Workspace

Handles configuration loading, validation, and environment setup.
"""

import os
import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

class SessionSettings(BaseModel):
    """Session manager configuration."""
    default_budget: float = 5.00
    invite_base_url: str = "hivemind.io"
    max_id_attempts: int = 50

class BudgetSettings(BaseModel):
    """Budget ledger configuration."""
    initial_budget: float = 5.00

class AgentSettings(BaseModel):
    """Agent hub configuration."""
    load_default_agents: bool = True

class MonitoringSettings(BaseModel):
    """Monitoring configuration."""
    dashboard_port: int = 8000
    enable_monitoring: bool = True
    log_level: str = "INFO"

class HiveMindConfig(BaseModel):
    """Main configuration for HiveMind Workspace."""

    # Data directory for logs and generated files
    data_dir: str = "./data"

    # Component configurations
    sessions: SessionSettings = Field(default_factory=SessionSettings)
    budget: BudgetSettings = Field(default_factory=BudgetSettings)
    agents: AgentSettings = Field(default_factory=AgentSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    # Environment
    environment: str = "development"

    @field_validator('data_dir')
    @classmethod
    def validate_data_dir(cls, v):
        """Ensure data directory exists."""
        Path(v).mkdir(parents=True, exist_ok=True)
        return v

class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None,
                 env_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file
            env_file: Path to .env file
        """
        self.config_path = config_path
        self.env_file = env_file or ".env"
        self.config: Optional[HiveMindConfig] = None

    def load_config(self) -> HiveMindConfig:
        """Load configuration from file and environment."""
        if Path(self.env_file).exists():
            load_dotenv(self.env_file)

        config_data = {}

        if self.config_path and Path(self.config_path).exists():
            config_data = self._load_config_file(self.config_path)

        # Environment variables win over file values
        config_data = self._apply_env_overrides(config_data)

        self.config = HiveMindConfig(**config_data)

        logger.info(f"Configuration loaded: {self.config.environment} environment")
        return self.config

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from JSON or YAML file."""
        path = Path(config_path)

        try:
            with open(path, 'r') as f:
                if path.suffix.lower() in ['.yaml', '.yml']:
                    return yaml.safe_load(f) or {}
                elif path.suffix.lower() == '.json':
                    return json.load(f)
                else:
                    raise ValueError(f"Unsupported config file format: {path.suffix}")

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config file {config_path}: {e}")
            return {}

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides."""
        env_mappings = {
            'HIVEMIND_DATA_DIR': 'data_dir',
            'HIVEMIND_ENVIRONMENT': 'environment',
            'HIVEMIND_DASHBOARD_PORT': 'monitoring.dashboard_port',
            'HIVEMIND_LOG_LEVEL': 'monitoring.log_level',
            'HIVEMIND_DEFAULT_BUDGET': 'sessions.default_budget',
            'HIVEMIND_INITIAL_BUDGET': 'budget.initial_budget',
            'HIVEMIND_INVITE_BASE_URL': 'sessions.invite_base_url',
            'HIVEMIND_LOAD_DEFAULT_AGENTS': 'agents.load_default_agents',
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                self._set_nested_config(config_data, config_path, env_value)

        return config_data

    def _set_nested_config(self, config: Dict[str, Any],
                          path: str, value: str) -> None:
        """Set a nested configuration value."""
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        final_key = keys[-1]

        if value.lower() in ['true', 'false']:
            current[final_key] = value.lower() == 'true'
        elif value.isdigit():
            current[final_key] = int(value)
        else:
            try:
                current[final_key] = float(value)
            except ValueError:
                current[final_key] = value

    def save_config(self, output_path: str) -> bool:
        """Save current configuration to file."""
        if not self.config:
            logger.error("No configuration loaded to save")
            return False

        try:
            path = Path(output_path)
            config_dict = self.config.model_dump()

            with open(path, 'w') as f:
                if path.suffix.lower() in ['.yaml', '.yml']:
                    yaml.dump(config_dict, f, default_flow_style=False, indent=2)
                else:
                    json.dump(config_dict, f, indent=2)

            logger.info(f"Configuration saved to {output_path}")
            return True

        except OSError as e:
            logger.error(f"Failed to save configuration: {e}")
            return False

    def get_config(self) -> HiveMindConfig:
        """Get the current configuration."""
        if self.config is None:
            self.config = self.load_config()
        return self.config

_config_manager = ConfigManager()

def get_config() -> HiveMindConfig:
    """Get the global configuration instance."""
    return _config_manager.get_config()

def load_config(config_path: Optional[str] = None,
                env_file: Optional[str] = None) -> HiveMindConfig:
    """Load configuration with custom paths."""
    global _config_manager
    _config_manager = ConfigManager(config_path, env_file)
    return _config_manager.load_config()

def setup_logging(config: HiveMindConfig) -> None:
    """Setup logging based on configuration."""
    level = getattr(logging, config.monitoring.log_level.upper(), logging.INFO)

    log_dir = Path(config.data_dir) / "logs"
    log_dir.mkdir(exist_ok=True)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_dir / "hivemind.log")
        ]
    )

    logger.info(f"Logging configured at {config.monitoring.log_level} level")
