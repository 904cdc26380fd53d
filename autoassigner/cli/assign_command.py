"""Implementation of the autoassigner command actions."""

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from autoassigner.core.management.config_manager import ConfigManager
from autoassigner.core.management.group_store import GroupConfigStore
from autoassigner.core.orchestrator import AssignmentOrchestrator
from autoassigner.models.config import AutoAssignerConfig
from autoassigner.models.state import GroupCounts
from autoassigner.utils.logging import AutoAssignerLogger, LoggingContext


console = Console()


def load_config(config_path: Path) -> AutoAssignerConfig:
    return ConfigManager(config_path).load_config()


def list_groups_command(config: AutoAssignerConfig) -> None:
    """Print the groups that have a configuration file."""
    groups = GroupConfigStore(config.storage.conf_path).list_groups()
    if not groups:
        console.print("No groups found in config directory")
        return

    console.print("Available groups:")
    for group in groups:
        console.print(f"  {escape(group)}")


def show_counts_command(config: AutoAssignerConfig, group: str) -> None:
    """Print the assignment counts of a group in configured order."""
    orchestrator = AssignmentOrchestrator(config)
    counts = asyncio.run(orchestrator.get_counts(group))
    console.print(f"[bold]Assignment counts for group {escape(counts.group)}[/bold]")
    console.print(render_counts(counts))


def render_counts(counts: GroupCounts) -> Table:
    table = Table(show_header=True)
    table.add_column("User", style="cyan")
    table.add_column("Count", justify="right")
    for user, count in counts.ordered():
        table.add_row(escape(user), str(count))
    return table


def reset_counts_command(config: AutoAssignerConfig, group: str) -> None:
    """Reset the assignment counts of a group to zero."""
    orchestrator = AssignmentOrchestrator(config)
    asyncio.run(orchestrator.reset_counts(group))
    console.print(f"[green]✓ Successfully reset assignment counts for group {escape(group)}[/green]")


def assign_command(config: AutoAssignerConfig, group: str, dry_run: bool = False) -> None:
    """Assign the next member of a group.

    The assignee is printed only once the assignment has been recorded, so a
    failed write never leaves the caller with an unrecorded assignee.
    """
    logger = AutoAssignerLogger("autoassigner.cli")
    orchestrator = AssignmentOrchestrator(config, logger=logger)

    with LoggingContext(logger, "assign", group=group, dry_run=dry_run):
        result = asyncio.run(orchestrator.assign(group, dry_run=dry_run))

    if result.dry_run:
        console.print(f"[yellow]DRY RUN[/yellow] Would assign to: {escape(result.user)}")
    else:
        # Plain output so the assignee can be consumed by scripts
        click.echo(result.user)


def version_message(version: str, build_time: str, git_commit: str) -> str:
    return f"Version: {version}\nBuild Time: {build_time}\nGit Commit: {git_commit}"

