"""Main CLI command for AutoAssigner."""

import os
from pathlib import Path
from typing import Optional

import click

from autoassigner import __build_time__, __git_commit__, __version__
from autoassigner.cli.assign_command import (
    assign_command,
    list_groups_command,
    load_config,
    reset_counts_command,
    show_counts_command,
    version_message,
)
from autoassigner.utils.exceptions import AutoAssignerError, ErrorHandler
from autoassigner.utils.logging import close_logging, configure_logging


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("groupname", required=False)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Simulate assignment without updating logs or counts"
)
@click.option(
    "--show-counts",
    is_flag=True,
    help="Display current assignment counts for the group"
)
@click.option(
    "--reset-counts",
    is_flag=True,
    help="Reset assignment counts for the group"
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default="config.json",
    show_default=True,
    help="Path to the configuration file"
)
@click.option(
    "--list-groups", "-l",
    is_flag=True,
    help="List all available groups"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable verbose output (DEBUG logging and tracebacks)"
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True),
    envvar="AUTOASSIGNER_LOG_FILE",
    help="Write JSON logs to this file instead of stderr"
)
@click.version_option(
    __version__,
    "--version", "-v",
    prog_name="autoassigner",
    message=version_message(__version__, __build_time__, __git_commit__),
    help="Display version information"
)
@click.pass_context
def cli(
    ctx: click.Context,
    groupname: Optional[str],
    dry_run: bool,
    show_counts: bool,
    reset_counts: bool,
    config_path: str,
    list_groups: bool,
    verbose: bool,
    log_file: Optional[str],
) -> None:
    """AutoAssigner: rotate task assignment among the members of a group.

    Uses the group's selection strategy and availability check to pick the
    next assignee, prints it and records the assignment.

    \b
    Examples:
        autoassigner team-alpha
        autoassigner team-alpha --dry-run
        autoassigner team-alpha --show-counts
        autoassigner --list-groups
    """
    if not list_groups and not groupname:
        raise click.UsageError("requires exactly one argument", ctx=ctx)

    log_level = "DEBUG" if verbose else os.getenv("AUTOASSIGNER_LOG_LEVEL", "WARNING")
    configure_logging(log_level=log_level, log_file=log_file)
    ctx.call_on_close(close_logging)

    error_handler = ErrorHandler(verbose=verbose)
    try:
        config = load_config(Path(config_path))

        if list_groups:
            list_groups_command(config)
        elif show_counts:
            show_counts_command(config, groupname)
        elif reset_counts:
            reset_counts_command(config, groupname)
        else:
            assign_command(config, groupname, dry_run=dry_run)
    except AutoAssignerError as e:
        context = {"group": groupname} if groupname else None
        error_handler.handle_error(e, context)
        ctx.exit(1)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
