"""Tests for configuration."""

import json
from pathlib import Path

import pytest


def test_defaults(monkeypatch):
    from project_coordinator.config import DEFAULT_KNOWLEDGE_BASE, CoordinatorConfig

    for var in ("KNOWLEDGE_BASE_PATH", "MCP_SERVER_NAME", "MCP_SERVER_VERSION", "MCP_PROTOCOL_VERSION",
                "DEBUG", "ENABLE_LOGGING", "HEAT_MAP_DAYS", "HEALTH_WINDOW_DAYS", "ENABLE_VALIDATION"):
        monkeypatch.delenv(var, raising=False)

    config = CoordinatorConfig.from_env()

    assert config.knowledge_base_path == DEFAULT_KNOWLEDGE_BASE
    assert config.server_name == "project-coordinator"
    assert config.server_version == "1.0.0"
    assert config.protocol_version == "2024-11-05"
    assert config.debug is False
    assert config.enable_logging is True
    assert config.heat_map_days == 7
    assert config.health_window_days == 30
    assert config.enable_validation is None
    assert config.validation_enabled is True


def test_environment_overrides(monkeypatch, tmp_path):
    from project_coordinator.config import CoordinatorConfig

    monkeypatch.setenv("KNOWLEDGE_BASE_PATH", str(tmp_path / "kb"))
    monkeypatch.setenv("MCP_SERVER_NAME", "coordinator-test")
    monkeypatch.setenv("DEBUG", "TRUE")
    monkeypatch.setenv("ENABLE_LOGGING", "false")
    monkeypatch.setenv("HEAT_MAP_DAYS", "14")
    monkeypatch.setenv("ENABLE_VALIDATION", "false")

    config = CoordinatorConfig.from_env()

    assert config.knowledge_base_path == tmp_path / "kb"
    assert config.server_name == "coordinator-test"
    assert config.debug is True
    assert config.enable_logging is False
    assert config.heat_map_days == 14
    assert config.validation_enabled is False


def test_knowledge_base_path_expands_home(monkeypatch, tmp_path):
    from project_coordinator.config import CoordinatorConfig

    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("KNOWLEDGE_BASE_PATH", "~/kb")

    assert CoordinatorConfig.from_env().knowledge_base_path == tmp_path / "kb"


def test_security_config_written_with_defaults(tmp_path):
    from project_coordinator.config import SecurityConfig

    path = tmp_path / "kb" / "security-config.json"
    config = SecurityConfig.load(path)

    data = json.loads(path.read_text())
    assert data["maxProjectNameLength"] == 100
    assert data["maxPathLength"] == 500
    assert data["maxDescriptionLength"] == 2000
    assert data["maxStatusLength"] == 500
    assert data["maxNotesLength"] == 10000
    assert data["maxSearchPatternLength"] == 300
    assert data["enableValidation"] is True
    assert str(Path.home() / "Developer") in data["allowedPaths"]
    assert config.max_notes_length == 10000


def test_security_config_reads_existing_file(tmp_path):
    from project_coordinator.config import SecurityConfig

    path = tmp_path / "security-config.json"
    path.write_text(json.dumps({"allowedPaths": ["/srv/code"], "enableValidation": False}))

    config = SecurityConfig.load(path)

    assert config.allowed_paths == ["/srv/code"]
    assert config.enable_validation is False
    assert config.max_path_length == 500


def test_malformed_security_config_falls_back_without_overwriting(tmp_path):
    from project_coordinator.config import SecurityConfig

    path = tmp_path / "security-config.json"
    path.write_text("{broken")

    config = SecurityConfig.load(path)

    assert config.enable_validation is True
    assert path.read_text() == "{broken"


@pytest.mark.parametrize("env_value,file_value,expected", [
    (None, False, False),
    ("true", False, True),
    ("false", True, False),
])
def test_validation_override(tmp_path, env_value, file_value, expected):
    from project_coordinator.config import CoordinatorConfig, SecurityConfig

    SecurityConfig(enable_validation=file_value).save(tmp_path / "security-config.json")
    override = None if env_value is None else env_value == "true"
    config = CoordinatorConfig(knowledge_base_path=tmp_path, enable_validation=override)

    config.load_security()

    assert config.validation_enabled is expected


def test_display_mentions_paths(tmp_path):
    from project_coordinator.config import CoordinatorConfig

    text = CoordinatorConfig(knowledge_base_path=tmp_path).display()

    assert str(tmp_path) in text
    assert "security-config.json" in text
