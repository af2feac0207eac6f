"""Tests for the CLI."""

import asyncio
import json

from click.testing import CliRunner


def _seed(kb_root, clock=None):
    """Create a knowledge base with one project, outside the CLI."""
    from project_coordinator.config import CoordinatorConfig
    from project_coordinator.server import open_context

    async def seed():
        config = CoordinatorConfig(knowledge_base_path=kb_root, enable_validation=False, enable_logging=False)
        context = await open_context(config)
        await context.store.add_project("Foo", "/tmp/nowhere/Foo", "Demo app")

    asyncio.run(seed())


def test_version():
    from project_coordinator.cli import main

    result = CliRunner().invoke(main, ["version"])

    assert result.exit_code == 0
    assert "project-coordinator v1.0.0" in result.output


def test_config_shows_knowledge_base(quiet_env):
    from project_coordinator.cli import main

    result = CliRunner().invoke(main, ["config"])

    assert result.exit_code == 0
    assert "Project Coordinator Configuration" in result.output
    assert (quiet_env / "security-config.json").exists()


def test_list_empty(quiet_env):
    from project_coordinator.cli import main

    result = CliRunner().invoke(main, ["list"])

    assert result.exit_code == 0
    assert "No projects currently tracked." in result.output


def test_list_and_status(quiet_env):
    from project_coordinator.cli import main

    _seed(quiet_env)
    runner = CliRunner()

    listing = runner.invoke(main, ["list"])
    status = runner.invoke(main, ["status", "Foo"])

    assert listing.exit_code == 0
    assert "Tracked Projects" in listing.output
    assert "Foo" in listing.output
    assert status.exit_code == 0
    assert "Foo Status" in status.output
    assert "Active" in status.output


def test_unknown_project_exits_nonzero(quiet_env):
    from project_coordinator.cli import main

    result = CliRunner().invoke(main, ["status", "Ghost"])

    assert result.exit_code == 1
    assert "Project not found: Ghost" in result.output


def test_task_add_and_done(quiet_env):
    from project_coordinator.cli import main

    _seed(quiet_env)
    runner = CliRunner()

    added = runner.invoke(main, ["task", "add", "Foo", "Ship widget"])
    done = runner.invoke(main, ["task", "done", "Foo", "Ship widget"])
    missing = runner.invoke(main, ["task", "done", "Foo", "Ship widget"])

    assert added.exit_code == 0
    assert "Added task to Foo: Ship widget" in added.output
    assert done.exit_code == 0
    assert missing.exit_code == 1

    record = json.loads((quiet_env / "projects" / "Foo-analytics.json").read_text())
    assert record["completedTasks"] == ["Ship widget"]
    assert record["currentTasks"] == []


def test_reports(quiet_env):
    from project_coordinator.cli import main

    _seed(quiet_env)
    runner = CliRunner()

    assert "Activity Heat Map" in runner.invoke(main, ["activity", "--days", "3"]).output
    assert "Technology Analysis" in runner.invoke(main, ["trends"]).output
    assert "Project Health Report" in runner.invoke(main, ["health"]).output
    assert "Status Timeline" in runner.invoke(main, ["timeline", "Foo"]).output
    assert "No analytics for Ghost" in runner.invoke(main, ["timeline", "Ghost"]).output


def test_health_summary_table(quiet_env):
    from project_coordinator.cli import main

    _seed(quiet_env)

    result = CliRunner().invoke(main, ["health", "--summary"])

    assert result.exit_code == 0
    assert "Foo" in result.output
    assert "50/100" in result.output


def test_serve_subcommand_runs_server(quiet_env):
    from project_coordinator.cli import main

    request = json.dumps({"jsonrpc": "2.0", "id": 1, "method": "tools/list"}) + "\n"

    result = CliRunner().invoke(main, ["serve"], input=request)

    assert result.exit_code == 0
    response = json.loads(result.output.strip().splitlines()[-1])
    assert response["id"] == 1
    assert len(response["result"]["tools"]) == 5


def test_activity_rejects_non_positive_days(quiet_env):
    from project_coordinator.cli import main

    result = CliRunner().invoke(main, ["activity", "--days", "0"])

    assert result.exit_code == 2
    assert "Invalid value" in result.output
