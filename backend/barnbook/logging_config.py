"""
Barnbook Seed — Logging Configuration
======================================

What:  Configures process-wide logging and a per-run correlation id.
How:   Records below ERROR go to stdout; ERROR and above go to stderr, which
       is the error channel the process exit contract refers to. Every record
       carries the current run id through a logging filter.
When:  setup_logging() is called once by the CLI before any other work.

Log Format:
    2026-01-15T12:00:00 [INFO] barnbook.services.seed_service [3f9c2a1b]: Seed identity ensured: ...

Privacy:
    Raw credentials are never passed to a logger. Seed identities hold the
    password as a pydantic SecretStr, which renders as '**********'.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional

# Coroutine-local storage for the current run id. asyncio tasks and
# to_thread workers copy the context, so hashing threads see it too.
run_id_var: ContextVar[str] = ContextVar("run_id", default="-")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(run_id)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class RunIdFilter(logging.Filter):
    """Stamps each record with the run id from the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        return True


class MaxLevelFilter(logging.Filter):
    """Passes only records strictly below `level`."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def new_run_id(run_id: Optional[str] = None) -> str:
    """
    Starts a new correlation id for the current context and returns it.

    Short 8-character ids are enough to tell invocations apart in a log file.
    """
    rid = run_id or uuid.uuid4().hex[:8]
    run_id_var.set(rid)
    return rid


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(run_id)s]: %(message)s

    Handlers:
        stdout: DEBUG..WARNING (progress, confirmations, warnings)
        stderr: ERROR..CRITICAL (failures the operator must act on)
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    run_id_filter = RunIdFilter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(MaxLevelFilter(logging.ERROR))
    stdout_handler.addFilter(run_id_filter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)
    stderr_handler.addFilter(run_id_filter)

    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        handlers=[stdout_handler, stderr_handler],
        force=True,  # Override any existing logging config
    )

    # Reduce noise from third-party libraries unless explicitly debugging
    if log_level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("asyncio").setLevel(logging.WARNING)
