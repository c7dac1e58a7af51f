"""
Logging setup for the discount engine.

Operators running the engine from cron or the CLI want one line per rule and
a final summary; developers chasing a pricing bug want module names and
timings. Both are served by the modes below.
"""

import logging
import sys
import time
from contextlib import contextmanager
from enum import Enum
from typing import Generator, Optional


class UserMode(Enum):
    """Who is reading the log output."""

    TECHNICAL = "technical"
    BUSINESS = "business"
    SILENT = "silent"


# mode -> (default level, format)
MODE_FORMATS = {
    UserMode.TECHNICAL: (logging.INFO, "%(asctime)s - %(levelname)s - %(name)s - %(message)s"),
    UserMode.BUSINESS: (logging.WARNING, "%(levelname)s: %(message)s"),
    UserMode.SILENT: (logging.ERROR, "ERROR: %(message)s"),
}


class LoggingConfig:
    """
    Applies one UserMode to the root logger.

    Output goes to stderr so that the CLI can print JSON summaries on stdout.
    """

    NOISY_LOGGERS = [
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "alembic",
        "werkzeug",
    ]

    def __init__(self, mode: UserMode = UserMode.BUSINESS, level: Optional[str] = None):
        self.mode = mode
        default_level, self.format = MODE_FORMATS[mode]
        # An explicit LOG_LEVEL only applies to technical output
        if level and mode is UserMode.TECHNICAL:
            self.level = logging.getLevelName(level.upper())
            if not isinstance(self.level, int):
                self.level = default_level
        else:
            self.level = default_level

    def apply(self) -> logging.Logger:
        logging.basicConfig(
            level=self.level,
            format=self.format,
            handlers=[logging.StreamHandler(sys.stderr)],
            force=True,
        )
        for name in self.NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        logger = logging.getLogger("campaign_engine")
        logger.setLevel(self.level)
        logger.info(f"🔧 Logging in {self.mode.value} mode at {logging.getLevelName(self.level)}")
        return logger


def setup_logging(verbose: bool = False, level: Optional[str] = None, quiet: bool = False) -> logging.Logger:
    """
    Configure logging for a CLI or server process.

    Args:
        verbose: Technical output with timestamps and module names
        level: Level name for technical output (e.g. Config.app.LOG_LEVEL)
        quiet: Errors only; takes precedence over verbose
    """
    if quiet:
        mode = UserMode.SILENT
    elif verbose:
        mode = UserMode.TECHNICAL
    else:
        mode = UserMode.BUSINESS
    return LoggingConfig(mode, level).apply()


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    return f"{int(seconds // 60)}m {seconds % 60:.1f}s"


class ExecutionTimer:
    """Logs how long a block took, and whether it raised."""

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or logging.getLogger(__name__)
        self.elapsed: Optional[float] = None
        self._start = None

    def __enter__(self):
        self._start = time.perf_counter()
        self.logger.info(f"⏱️  Starting: {self.name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._start
        if exc_type is None:
            self.logger.info(f"✅ Completed: {self.name} in {format_duration(self.elapsed)}")
        else:
            self.logger.error(f"❌ Failed: {self.name} after {format_duration(self.elapsed)}")


@contextmanager
def time_operation(name: str, logger: Optional[logging.Logger] = None) -> Generator[ExecutionTimer, None, None]:
    """
    Example:
        with time_operation("Discount engine run", logger):
            summary = engine.run()
    """
    with ExecutionTimer(name, logger) as timer:
        yield timer


__all__ = [
    "LoggingConfig",
    "UserMode",
    "ExecutionTimer",
    "time_operation",
    "setup_logging",
]
