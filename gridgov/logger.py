"""
GridGov Logging
===============

Root-logger setup shared by every gridgov module: a rich console handler (or a
plain stream handler when highlighting is off), an optional rotating file, and
a formatter that strips terminal control sequences from caller-supplied text.

Usage:
    >>> from gridgov.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Governance engine started")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_FILE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_FILE_OUTPUT,
)


LOG_FILE_PATH = Path(__file__).parent.parent / "logs" / "gridgov.log"

GRIDGOV_THEME = Theme(
    {
        "gridgov.error_kind":  "bold red",
        "gridgov.height":      "bold cyan",
        "gridgov.identity":    "magenta",
        "gridgov.level":       "bold",
        "gridgov.proposal":    "bold yellow",
        "gridgov.timestamp":   "dim cyan",
        "gridgov.weight":      "green",
    }
)


class TerminalSafeFormatter(logging.Formatter):
    """
    Formatter that removes ANSI escapes and control characters.

    Descriptions and identities come from callers, so a record must not be
    able to move the cursor or recolour the terminal (CWE-117).
    """

    _unsafe_re = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"      # CSI sequences
        r"|\x1b[@-Z\\-_]"              # two-byte escapes
        r"|[\x00-\x08\x0B-\x1F\x7F]"   # controls except tab and newline
    )

    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        return cls._unsafe_re.sub("", text)

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


def _build_formatter(log_format: str, date_format: str) -> Tuple[TerminalSafeFormatter, bool]:
    """
    Build the shared formatter, falling back to the defaults when the
    configured format cannot render a record. Returns (formatter, fell_back).
    """
    sample = logging.LogRecord(
        name="gridgov", level=logging.INFO, pathname="", lineno=0,
        msg="", args=(), exc_info=None,
    )
    try:
        formatter = TerminalSafeFormatter(fmt=str(log_format), datefmt=f"{date_format} UTC")
        formatter.format(sample)
        time.strftime(str(date_format))
        fell_back = False
    except (ValueError, KeyError, TypeError):
        formatter = TerminalSafeFormatter(
            fmt=str(LOG_FORMAT.default()),
            datefmt=f"{LOG_DATE_FORMAT.default()} UTC",
        )
        fell_back = True
    # Timestamps are UTC regardless of host timezone
    formatter.converter = time.gmtime
    return formatter, fell_back


class GovernanceLogHighlighter(RegexHighlighter):
    """
    Colors proposal ids, heights, weights, identities and error kinds.

    Quoted text in a record is a caller-supplied description; spans touching
    it are discarded so a description cannot pass itself off as engine output.
    """

    base_style = "gridgov."
    highlights = [
        r"(?P<timestamp>^\S+ UTC)",
        r"(?P<level>\b(DEBUG|INFO|WARNING|ERROR|CRITICAL)\b)",
        r"(?P<error_kind>\b(UNAUTHORIZED|SYSTEM_PAUSED|NOT_FOUND|ALREADY_VOTED|"
        r"VOTING_CLOSED|VOTING_STILL_OPEN|QUORUM_NOT_MET)\b)",
        r"(?P<proposal>#\d+)",
        r"(?P<height>\bh=\d+\b)",
        r"(?P<weight>\bweight=\d+\b)",
        r"(?P<identity>\bS[TPM][0-9A-Z]{20,}\b)",
    ]

    # repr() output: '...' with escaped quotes inside, or "..." when the text has a '
    _quoted_re = re.compile(r"'(?:[^'\\\n]|\\.)*'|\"(?:[^\"\\\n]|\\.)*\"")

    @classmethod
    def quoted_regions(cls, plain: str) -> List[Tuple[int, int]]:
        return [m.span() for m in cls._quoted_re.finditer(plain)]

    def highlight(self, text) -> None:
        super().highlight(text)
        regions = self.quoted_regions(text.plain)
        if regions:
            text.spans = [
                span for span in text.spans
                if not any(span.start < end and span.end > start for start, end in regions)
            ]


class LogManager:
    """
    Owns the root-logger handlers.

    A module-level instance configures logging once at import; configure(force=True)
    swaps the handlers, e.g. after a config file has been loaded.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._configured = False

    @property
    def is_configured(self) -> bool:
        return self._configured

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
        highlighting: Optional[bool] = None,
        force: bool = False,
    ) -> None:
        """
        Replace the root logger's handlers.

        Unset arguments fall back to the LOG_* values from constants (and .env).
        Without *force*, a second call is a no-op.
        """
        with self._lock:
            if self._configured and not force:
                return

            level = getattr(logging, str(log_level or LOG_LEVEL).upper(), logging.INFO)
            if highlighting is None:
                highlighting = bool(LOG_CONSOLE_HIGHLIGHTING)
            if file_output is None:
                file_output = bool(LOG_FILE_OUTPUT)

            root = logging.getLogger()
            root.setLevel(level)
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()

            formatter, fell_back = _build_formatter(LOG_FORMAT, LOG_DATE_FORMAT)
            handlers: List[logging.Handler] = []
            if console_output:
                handlers.append(self._console_handler(highlighting))
            if file_output:
                handlers.append(self._file_handler(Path(log_file) if log_file else LOG_FILE_PATH))
            for handler in handlers:
                handler.setLevel(level)
                handler.setFormatter(formatter)
                root.addHandler(handler)

            self._configured = True

        if fell_back:
            logging.getLogger(__name__).warning(
                f"Invalid LOG_FORMAT {str(LOG_FORMAT)!r} or LOG_DATE_FORMAT "
                f"{str(LOG_DATE_FORMAT)!r}, using defaults"
            )

    @staticmethod
    def _console_handler(highlighting: bool) -> logging.Handler:
        if not highlighting:
            return logging.StreamHandler(sys.stdout)
        return RichHandler(
            console=Console(theme=GRIDGOV_THEME, highlight=False),
            highlighter=GovernanceLogHighlighter(),
            keywords=[],
            markup=False,
            rich_tracebacks=True,
            show_level=False,
            show_path=False,
            show_time=False,
        )

    @staticmethod
    def _file_handler(path: Path) -> logging.Handler:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            filename=str(path),
            maxBytes=LOG_MAX_FILE_SIZE,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)


_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    """Logger for *name*, configuring the root logger on first use."""
    return _manager.get_logger(name)


def configure_logging(logging_config) -> None:
    """Re-apply logging settings from a loaded ``LoggingConfig`` section."""
    _manager.configure(
        log_level=logging_config.level,
        log_file=Path(logging_config.file) if logging_config.file else None,
        console_output=logging_config.console,
        file_output=logging_config.file_output,
        highlighting=logging_config.highlighting,
        force=True,
    )


_manager.configure()
