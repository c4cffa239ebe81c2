import logging
import os
import sys
import time
from typing import Optional

from tqdm.auto import tqdm as _tqdm

PACKAGE_LOGGER = "linear_gp"
# Per-program fitness lines are DEBUG records from this logger.
EVALUATION_LOGGER = "linear_gp.evolution.evaluation"

_CONSOLE_FMT = "%(asctime)s │ %(levelname)-5s │ %(shortname)s │ %(message)s"
_FILE_FMT = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"


class _TqdmCompatibleHandler(logging.StreamHandler):
    """Console handler writing through ``tqdm.write`` so evaluation bars survive."""

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        try:
            _tqdm.write(self.format(record), file=self.stream)
        except Exception:  # pragma: no cover
            self.handleError(record)


class _ConsoleFormatter(logging.Formatter):
    """Compact console lines: package prefix dropped, optional ANSI colour per level."""

    RESET = "\033[0m"
    DIM = "\033[2m"
    LEVEL_COLOURS = {
        logging.CRITICAL: "\033[35m",
        logging.ERROR: "\033[31m",
        logging.WARNING: "\033[33m",
        logging.INFO: "\033[36m",
        logging.DEBUG: "\033[90m",
    }

    def __init__(self, use_color: bool) -> None:
        super().__init__(_CONSOLE_FMT, datefmt="%H:%M:%S")
        self._use_color = use_color

    @staticmethod
    def short_name(name: str) -> str:
        # "linear_gp.evolution.engine" -> "evolution.engine"
        prefix = PACKAGE_LOGGER + "."
        return name[len(prefix):] if name.startswith(prefix) else name

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        stamp = super().formatTime(record, datefmt)
        return f"{self.DIM}{stamp}{self.RESET}" if self._use_color else stamp

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        record.shortname = self.short_name(record.name)
        if not self._use_color:
            return super().format(record)

        colour = self.LEVEL_COLOURS.get(record.levelno, self.LEVEL_COLOURS[logging.DEBUG])
        saved = record.levelname, record.shortname, record.msg
        record.levelname = f"{colour}{record.levelname:<5}{self.RESET}"
        record.shortname = f"{self.DIM}{record.shortname}{self.RESET}"
        record.msg = f"{colour}{record.msg}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname, record.shortname, record.msg = saved


def _use_color(stream) -> bool:
    # FORCE_COLOR wins; otherwise colour only on a TTY without NO_COLOR
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR") is not None:
        return False
    return bool(getattr(stream, "isatty", lambda: False)())


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    *,
    show_evaluations: bool = False,
) -> None:
    """Configure root logging for a run.

    The console gets a tqdm-safe handler; ``log_file`` adds a plain file
    handler. The ``linear_gp`` package logger follows ``level``, while the
    per-program fitness lines of the evaluation logger are shown only with
    ``show_evaluations``.
    """
    console = _TqdmCompatibleHandler(stream=sys.stdout)
    console.setLevel(level)
    console.setFormatter(_ConsoleFormatter(use_color=_use_color(sys.stdout)))
    handlers: list[logging.Handler] = [console]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FMT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    logging.getLogger(EVALUATION_LOGGER).setLevel(logging.DEBUG if show_evaluations else max(level, logging.INFO))

    # Console lines carry only the time; print the date once
    logging.getLogger(PACKAGE_LOGGER).info("Session started · %s", time.strftime("%Y-%m-%d"))
