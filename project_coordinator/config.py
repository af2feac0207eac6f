"""
Configuration management for Project Coordinator
Environment-based server settings plus the knowledge base security config
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from . import __version__

logger = logging.getLogger(__name__)

DEFAULT_KNOWLEDGE_BASE = Path.home() / ".project-coordinator" / "KnowledgeBase"
SECURITY_CONFIG_FILE = "security-config.json"


def _default_allowed_paths() -> list[str]:
    home = Path.home()
    return [
        str(home / "Developer"),
        str(home / "Documents"),
        str(home / "GitHub"),
        str(home / "Projects"),
        str(home / "Desktop" / "Development"),
        str(home / "Xcode"),
    ]


class SecurityConfig(BaseModel):
    """Input validation settings stored in <knowledge base>/security-config.json"""

    model_config = ConfigDict(populate_by_name=True)

    allowed_paths: list[str] = Field(default_factory=_default_allowed_paths, alias="allowedPaths")
    max_project_name_length: int = Field(default=100, alias="maxProjectNameLength")
    max_path_length: int = Field(default=500, alias="maxPathLength")
    max_description_length: int = Field(default=2000, alias="maxDescriptionLength")
    max_status_length: int = Field(default=500, alias="maxStatusLength")
    max_notes_length: int = Field(default=10000, alias="maxNotesLength")
    max_search_pattern_length: int = Field(default=300, alias="maxSearchPatternLength")
    enable_validation: bool = Field(default=True, alias="enableValidation")

    @classmethod
    def load(cls, path: Path) -> "SecurityConfig":
        """Load configuration from file, creating the default if none exists"""
        try:
            return cls.model_validate_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info(f"No security config at {path}, writing defaults")
        except (OSError, ValidationError) as e:
            logger.warning(f"Could not read security config {path}: {e}; using defaults")
            return cls()

        config = cls()
        try:
            config.save(path)
        except OSError as e:
            logger.warning(f"Could not write default security config {path}: {e}")
        return config

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump(by_alias=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


@dataclass
class CoordinatorConfig:
    """Configuration for the coordinator, built once at startup."""

    # Paths
    knowledge_base_path: Path = DEFAULT_KNOWLEDGE_BASE

    # Server metadata
    server_name: str = "project-coordinator"
    server_version: str = __version__
    protocol_version: str = "2024-11-05"

    # Logging
    debug: bool = False
    enable_logging: bool = True

    # Analytics windows (days)
    heat_map_days: int = 7
    health_window_days: int = 30

    # None defers to security-config.json
    enable_validation: Optional[bool] = None
    security: SecurityConfig = field(default_factory=SecurityConfig)

    @classmethod
    def from_env(cls) -> "CoordinatorConfig":
        """Create configuration from environment variables."""
        validation = os.environ.get("ENABLE_VALIDATION")
        return cls(
            knowledge_base_path=Path(
                os.environ.get("KNOWLEDGE_BASE_PATH", str(DEFAULT_KNOWLEDGE_BASE))
            ).expanduser(),
            server_name=os.environ.get("MCP_SERVER_NAME", "project-coordinator"),
            server_version=os.environ.get("MCP_SERVER_VERSION", __version__),
            protocol_version=os.environ.get("MCP_PROTOCOL_VERSION", "2024-11-05"),
            debug=os.environ.get("DEBUG", "false").lower() == "true",
            enable_logging=os.environ.get("ENABLE_LOGGING", "true").lower() == "true",
            heat_map_days=int(os.environ.get("HEAT_MAP_DAYS", 7)),
            health_window_days=int(os.environ.get("HEALTH_WINDOW_DAYS", 30)),
            enable_validation=None if validation is None else validation.lower() == "true",
        )

    @property
    def security_config_path(self) -> Path:
        return self.knowledge_base_path / SECURITY_CONFIG_FILE

    def load_security(self) -> SecurityConfig:
        """Read security-config.json and apply the environment override."""
        self.security = SecurityConfig.load(self.security_config_path)
        if self.enable_validation is not None:
            self.security.enable_validation = self.enable_validation
        return self.security

    @property
    def validation_enabled(self) -> bool:
        if self.enable_validation is not None:
            return self.enable_validation
        return self.security.enable_validation

    def display(self) -> str:
        """Display configuration (for debugging)"""
        allowed = "\n".join(f"    - {p}" for p in self.security.allowed_paths)
        return f"""
Project Coordinator Configuration
=================================
Server: {self.server_name} v{self.server_version} (protocol {self.protocol_version})
Debug: {self.debug}
Logging: {self.enable_logging}

Paths:
  Knowledge base: {self.knowledge_base_path}
  Security config: {self.security_config_path}

Analytics:
  Heat map window: {self.heat_map_days} days
  Health window: {self.health_window_days} days

Validation: {self.validation_enabled}
  Allowed paths:
{allowed}
=================================
"""
