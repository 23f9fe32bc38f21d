"""Structured logging for the consent notice tools.

Every command run binds a `run_id` and the command name to the structlog
context so that the log lines of one invocation can be grouped, e.g. when a
macros replacement iterates over several languages and child notices.
"""

import logging
import inspect
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog
from structlog.stdlib import BoundLogger
from .config import settings


def _is_test_environment() -> bool:
    """Detect if running in a test environment."""
    return "pytest" in sys.modules


def configure_logging(
    log_level: Optional[str] = None, json_output: Optional[bool] = None
) -> BoundLogger:
    """Configure structured logging for the command line tools.

    Args:
        log_level: Overrides `settings.LOG_LEVEL` (e.g. from `--log-level`).
        json_output: Forces JSON lines (True) or console rendering (False).
            Defaults to JSON in production, console otherwise.
    """
    if _is_test_environment():
        logging.root.setLevel(logging.CRITICAL + 1)
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            level=logging.CRITICAL + 1,
            force=True,
        )
        return structlog.stdlib.get_logger()

    if json_output is None:
        json_output = settings.is_production

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = (log_level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level, logging.INFO),
        force=True,
    )

    return structlog.stdlib.get_logger()


logger: BoundLogger = configure_logging()


def get_module_logger() -> BoundLogger:
    """Get a logger for the calling module with full path context."""
    current_frame = inspect.currentframe()
    if current_frame is None:
        return logger

    frame = current_frame.f_back
    module = inspect.getmodule(frame)

    if module:
        parts = module.__name__.split(".")
        return logger.bind(component=parts[-1], module_path=module.__name__)

    return logger.bind(component="unknown")


@contextmanager
def bind_run_context(
    command: str,
    dry_run: bool = False,
    run_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind command-scoped context to all logs emitted within the block.

    Args:
        command: CLI command name (e.g. "notice-macros").
        dry_run: Whether remote writes are disabled for this run.
        run_id: Identifier of the run. Generated when not provided.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The run identifier.
    """
    context: dict[str, Any] = {
        "run_id": run_id or str(uuid.uuid4()),
        "command": command,
        "dry_run": dry_run,
    }
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["run_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())
