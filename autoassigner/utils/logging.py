"""Structured logging utilities for AutoAssigner."""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import IO, Optional, Union

import structlog


_log_file: Optional[IO[str]] = None


def _level_number(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(
    log_level: str = "WARNING",
    log_file: Optional[Union[str, Path]] = None,
    structured: Optional[bool] = None
) -> None:
    """Configure structured logging for AutoAssigner.

    Log records never go to stdout, which carries the assignee name.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path; stderr is used when omitted
        structured: Use JSON output. Defaults to True for log files and
            False for the console.
    """
    global _log_file

    if structured is None:
        structured = log_file is not None

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]

    if structured:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    close_logging()
    if log_file:
        file_path = Path(log_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        _log_file = file_path.open("a", encoding="utf-8")
        output = _log_file
    else:
        output = sys.stderr

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(log_level)),
        logger_factory=structlog.WriteLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )


def close_logging() -> None:
    """Close the log file, if any, and send further records to stderr."""
    global _log_file

    if _log_file is None:
        return
    structlog.configure(logger_factory=structlog.WriteLoggerFactory(file=sys.stderr))
    _log_file.close()
    _log_file = None


def get_logger(name: str = "autoassigner") -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)


class AutoAssignerLogger:
    """Logger carrying group/user context through an assignment run."""

    def __init__(self, name: str = "autoassigner"):
        """Initialize AutoAssigner logger.

        Args:
            name: Logger name
        """
        self.name = name
        self.logger = get_logger(name).bind(logger=name)

    def bind(self, **kwargs) -> "AutoAssignerLogger":
        """Bind context variables to logger.

        Args:
            **kwargs: Context variables to bind

        Returns:
            New logger instance with bound context
        """
        new_logger = AutoAssignerLogger(name=self.name)
        new_logger.logger = self.logger.bind(**kwargs)
        return new_logger

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(message, **kwargs)

    def log_operation_start(self, operation: str, **context) -> "AutoAssignerLogger":
        """Log operation start with context.

        Args:
            operation: Operation name
            **context: Additional context

        Returns:
            Logger bound with operation context
        """
        operation_logger = self.bind(
            operation=operation,
            operation_start=datetime.now().isoformat(),
            **context
        )
        operation_logger.info(f"Starting {operation}")
        return operation_logger

    def log_operation_end(
        self,
        operation: str,
        success: bool = True,
        duration: Optional[float] = None,
        **context
    ) -> None:
        """Log operation completion.

        Args:
            operation: Operation name
            success: Whether operation succeeded
            duration: Operation duration in seconds
            **context: Additional context
        """
        status = "completed" if success else "failed"
        message = f"Operation {operation} {status}"

        log_context = {"success": success, **context}
        if duration is not None:
            log_context["duration_seconds"] = round(duration, 3)
            message += f" in {duration:.2f}s"

        if success:
            self.info(message, **log_context)
        else:
            self.error(message, **log_context)


class LoggingContext:
    """Context manager logging the start, end and duration of an operation."""

    def __init__(
        self,
        logger: AutoAssignerLogger,
        operation: str,
        **context
    ):
        """Initialize logging context.

        Args:
            logger: Logger instance
            operation: Operation name
            **context: Additional context
        """
        self.logger = logger
        self.operation = operation
        self.context = context
        self.start_time: Optional[float] = None
        self.operation_logger: Optional[AutoAssignerLogger] = None

    def __enter__(self) -> AutoAssignerLogger:
        self.start_time = time.time()
        self.operation_logger = self.logger.log_operation_start(
            self.operation, **self.context
        )
        return self.operation_logger

    def __exit__(self, exc_type, exc_value, traceback):
        duration = time.time() - self.start_time if self.start_time is not None else None
        extra = {}
        if exc_type is not None:
            extra["error_type"] = exc_type.__name__
            extra["error"] = str(exc_value)

        if self.operation_logger:
            self.operation_logger.log_operation_end(
                self.operation,
                success=exc_type is None,
                duration=duration,
                **extra
            )

        # Don't suppress exceptions
        return False
