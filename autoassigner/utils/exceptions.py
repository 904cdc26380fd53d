"""Exception handling utilities for AutoAssigner."""

from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel


GROUP_LIST_SUGGESTION = "Use --list-groups to see available groups"


class AutoAssignerError(Exception):
    """Base exception for AutoAssigner errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
        error_code: Optional[str] = None
    ):
        """Initialize AutoAssigner error.

        Args:
            message: Error message
            details: Additional error details
            suggestion: Suggestion for fixing the error
            error_code: Error code for categorization
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion
        self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary.

        Returns:
            Error dictionary representation
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "suggestion": self.suggestion,
            "error_code": self.error_code
        }


class ConfigurationError(AutoAssignerError):
    """Bad or missing process or group configuration."""
    pass


class InvalidGroupError(ConfigurationError):
    """Referenced group has no configuration file."""

    def __init__(self, group: str, reason: Optional[str] = None):
        super().__init__(
            f"group {group} does not exist",
            details={"group": group, **({"reason": reason} if reason else {})},
            suggestion=GROUP_LIST_SUGGESTION,
            error_code="AA002"
        )
        self.group = group


class SelectionError(AutoAssignerError):
    """Selection strategy failed."""
    pass


class EmptyMembersError(SelectionError):
    """Selection was attempted on an empty member list."""

    def __init__(self, message: str = "empty users list"):
        super().__init__(message, error_code="AA011")


class RemoteCheckFailure(AutoAssignerError):
    """Availability could not be determined (transport, status or parse error)."""
    pass


class AvailabilityError(AutoAssignerError):
    """Availability check failed for a user; distinct from the user being unavailable."""

    def __init__(self, user: str, cause: Exception, group: Optional[str] = None):
        details = {"user": user, "cause": str(cause)}
        if group is not None:
            details["group"] = group
        super().__init__(
            f"availability check error for user {user}: {cause}",
            details=details,
            error_code="AA020"
        )
        self.user = user


class NoAvailableAssigneeError(AutoAssignerError):
    """Every member of the group was checked and none was available."""

    def __init__(self, group: str, checked: int):
        super().__init__(
            f"no available assignee found for group {group}",
            details={"group": group, "checked": checked},
            error_code="AA030"
        )
        self.group = group
        self.checked = checked


class NoCountsFoundError(AutoAssignerError):
    """No assignment counts are persisted for the group."""

    def __init__(self, group: str):
        super().__init__(
            f"no counts found for group {group}",
            details={"group": group},
            suggestion="Add users to the group configuration file",
            error_code="AA040"
        )
        self.group = group


class FileOperationError(AutoAssignerError):
    """File operation errors."""
    pass


class CommitError(FileOperationError):
    """Writing the position, counts or audit log of an assignment failed."""
    pass


class ErrorHandler:
    """Renders errors for the command line."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """Initialize error handler.

        Args:
            console: Rich console for output (stderr by default)
            verbose: Show tracebacks
        """
        self.console = console or Console(stderr=True)
        self.verbose = verbose

    def handle_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """Display an error panel.

        Args:
            error: Exception to handle
            context: Additional context information
        """
        content = []
        if isinstance(error, AutoAssignerError):
            content.append(f"[red]{escape(error.message)}[/red]")
            if error.details:
                content.append("")
                content.append("[bold]Details:[/bold]")
                for key, value in error.details.items():
                    content.append(f"  {key}: {escape(str(value))}")
        else:
            content.append(f"[red]{escape(str(error))}[/red]")

        if context:
            content.append("")
            content.append("[bold]Context:[/bold]")
            for key, value in context.items():
                content.append(f"  {key}: {escape(str(value))}")

        suggestion = getattr(error, "suggestion", None)
        if suggestion:
            content.append("")
            content.append(f"[yellow]💡 Suggestion: {escape(suggestion)}[/yellow]")

        title = type(error).__name__
        error_code = getattr(error, "error_code", None)
        if error_code:
            title += f" ({error_code})"

        self.console.print(Panel("\n".join(content), title=title, border_style="red"))

        if self.verbose:
            self.console.print("\n[dim]Traceback:[/dim]")
            self.console.print_exception()
