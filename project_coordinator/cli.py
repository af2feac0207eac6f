"""Project Coordinator CLI."""

import asyncio
import sys

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from .config import CoordinatorConfig
from .errors import CoordinatorError

console = Console()


def _load_config() -> CoordinatorConfig:
    from .utils.logging import setup_logging

    config = CoordinatorConfig.from_env()
    setup_logging(config)
    return config


def _run(operation):
    """Open the knowledge base, run ``operation(context)`` and return its result."""
    from .server import open_context

    async def runner():
        context = await open_context(_load_config())
        return await operation(context)

    try:
        return asyncio.run(runner())
    except CoordinatorError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        sys.exit(1)


def _print_markdown(text: str) -> None:
    console.print(Markdown(text))


@click.group(invoke_without_command=True)
@click.pass_context
def main(ctx):
    """Project Coordinator - track a portfolio of software projects."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@main.command()
def serve():
    """Run the JSON-RPC server on stdin/stdout."""
    from .server import main as server_main

    sys.exit(server_main())


@main.command()
def version():
    """Show version."""
    from . import __version__
    console.print(f"project-coordinator v{__version__}")


@main.command()
def config():
    """Show the effective configuration."""
    cfg = _load_config()
    cfg.load_security()
    console.print(cfg.display())


@main.command("list")
def list_projects():
    """List tracked projects."""
    _print_markdown(_run(lambda context: context.store.list_projects()))


@main.command()
@click.argument("name")
def status(name: str):
    """Show a project's status report."""
    _print_markdown(_run(lambda context: context.store.get_project_status(name)))


@main.command()
@click.argument("name")
def timeline(name: str):
    """Show a project's status timeline."""
    text = _run(lambda context: context.analytics.status_timeline(name))
    if text is None:
        console.print(f"[yellow]No analytics for {name}[/yellow]")
        return
    _print_markdown(text)


@main.command()
@click.option("--days", "-d", type=click.IntRange(min=1), default=None, help="Window in days (default: HEAT_MAP_DAYS)")
def activity(days):
    """Show the activity heat map."""
    _print_markdown(_run(lambda context: context.analytics.activity_heat_map(days)))


@main.command()
def trends():
    """Show technology usage trends."""
    _print_markdown(_run(lambda context: context.analytics.technology_trends()))


@main.command()
@click.option("--summary", is_flag=True, help="One row per project instead of the full report")
def health(summary: bool):
    """Show project health."""
    if not summary:
        _print_markdown(_run(lambda context: context.analytics.health_report()))
        return

    scores = _run(lambda context: context.analytics.health_scores())
    if not scores:
        console.print("[yellow]No projects tracked yet[/yellow]")
        return

    table = Table()
    table.add_column("Project")
    table.add_column("Health")
    table.add_column("Recommendations")
    for name, project_health in scores:
        style = {"healthy": "green", "needs_attention": "yellow"}.get(project_health.category, "red")
        table.add_row(
            name,
            f"[{style}]{project_health.score}/100[/{style}]",
            ", ".join(project_health.recommendations) or "-",
        )
    console.print(table)


@main.group()
def task():
    """Manage a project's task list."""
    pass


@task.command("add")
@click.argument("name")
@click.argument("description")
def task_add(name: str, description: str):
    """Add a task to a project."""
    message = _run(lambda context: context.store.add_task(name, description))
    console.print(message, style="green", markup=False)


@task.command("done")
@click.argument("name")
@click.argument("description")
def task_done(name: str, description: str):
    """Mark a project task as completed."""
    message = _run(lambda context: context.store.complete_task(name, description))
    console.print(message, style="green", markup=False)


if __name__ == "__main__":
    main()
