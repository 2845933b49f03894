"""
Centralized logging configuration for FlashFrame.

Uses rotating file handler with logs stored in logs/ directory.
Includes colored console output for debug mode.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


_VERBOSE: bool = False
# Base directory for logs. Initialised to the project root and updated by
# setup_logging() for frozen builds so get_log_dir() always points at the
# effective runtime location.
_BASE_DIR: Path = Path(__file__).parent.parent.parent

LOG_FORMAT = '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s'
_INSTALLED_HANDLERS: list = []


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',       # Cyan
        'INFO': '\033[32m',        # Green
        'WARNING': '\033[33m',     # Yellow
        'ERROR': '\033[31m',       # Red
        'CRITICAL': '\033[35m',    # Magenta
    }
    FALLBACK_COLOR = '\033[38;5;208m'
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        original_levelname = record.levelname

        # Fallback paths (e.g. no media key backend) stand out regardless
        # of level.
        if '[FALLBACK]' in str(record.msg):
            color = self.FALLBACK_COLOR
        else:
            color = self.COLORS.get(record.levelname)

        if color is None:
            return super().format(record)

        record.levelname = f"{self.BOLD}{color}{record.levelname}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = original_levelname
        return f"{color}{message}{self.RESET}"


class SuppressingStreamHandler(logging.StreamHandler):
    """Stream handler that suppresses consecutive duplicate sources.

    Repeated DEBUG/INFO lines from the same logger/level are collapsed into a
    single summary line like "[N Suppressed: CHECK LOG]" while file logs
    remain unaffected.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._last_name: str | None = None
        self._last_level: int | None = None
        self._suppress_count: int = 0
        self._last_record: logging.LogRecord | None = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._emit_with_suppression(record)
        except Exception:
            self.handleError(record)

    def _emit_with_suppression(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.WARNING:
            self._flush_summary()
            self._emit_record(record)
            self._last_name = None
            self._last_level = None
            self._last_record = None
            return

        if record.name == self._last_name and record.levelno == self._last_level:
            self._suppress_count += 1
            return

        self._flush_summary()
        self._emit_record(record)
        self._last_name = record.name
        self._last_level = record.levelno
        self._last_record = record

    def _emit_record(self, record: logging.LogRecord) -> None:
        """Emit a single record with a Unicode-safe fallback.

        When the console encoding cannot represent some characters (e.g.
        Windows cp1252), the console line is degraded with replacement
        characters instead of raising a logging error. File logs keep the
        original text.
        """

        msg = self.format(record)
        stream = self.stream
        if stream is None:
            return
        text = msg + self.terminator
        try:
            stream.write(text)
        except UnicodeEncodeError:
            encoding = getattr(stream, "encoding", None) or "ascii"
            stream.write(text.encode(encoding, errors="replace").decode(encoding, errors="replace"))
        self.flush()

    def _flush_summary(self) -> None:
        last = self._last_record
        count = self._suppress_count
        self._suppress_count = 0
        if count <= 0 or last is None:
            return

        summary = logging.LogRecord(
            last.name,
            last.levelno,
            last.pathname,
            last.lineno,
            f"[{count} Suppressed: CHECK LOG]",
            args=None,
            exc_info=None,
        )
        summary.created = last.created
        summary.msecs = last.msecs
        summary.thread = last.thread
        summary.threadName = last.threadName
        self._emit_record(summary)

    def close(self) -> None:
        try:
            self._flush_summary()
        finally:
            super().close()


def get_log_dir() -> Path:
    """Return the directory used for log files.

    setup_logging() should be called once at startup so that _BASE_DIR is
    updated for frozen builds and the returned path matches the location used
    by the active RotatingFileHandler.
    """

    return _BASE_DIR / "logs"


def _resolve_base_dir() -> Path:
    """Return the directory next to the executable for frozen builds."""
    frozen = bool(getattr(sys, "frozen", False))
    if frozen:
        exe_path = Path(getattr(sys, "executable", "") or "")
        if exe_path.exists():
            return exe_path.parent
    return _BASE_DIR


def _teardown_handlers() -> None:
    """Remove and close the handlers installed by setup_logging()."""
    root_logger = logging.getLogger()
    while _INSTALLED_HANDLERS:
        handler = _INSTALLED_HANDLERS.pop()
        root_logger.removeHandler(handler)
        try:
            handler.close()
        except Exception:
            pass


def setup_logging(debug: bool = False, verbose: bool = False) -> None:
    """
    Configure application logging with file rotation.

    Args:
        debug: If True, set log level to DEBUG and enable console output.
        verbose: When True, enables additional high-volume debug logs
            (per-wait cycle traces, UI dispatch traces). Verbose mode also
            implies debug-level logging.
    """
    global _VERBOSE, _BASE_DIR

    debug_enabled = debug or verbose
    _BASE_DIR = _resolve_base_dir()

    # Calling setup twice must not stack handlers.
    _teardown_handlers()

    log_dir = get_log_dir()
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / "flashframe.log"

    level = logging.DEBUG if debug_enabled else logging.INFO

    # File handler with rotation (1MB max, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    file_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    _INSTALLED_HANDLERS.append(file_handler)

    if debug_enabled:
        console_handler = SuppressingStreamHandler(sys.stdout)
        if sys.stdout.isatty():
            console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        else:
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)
        _INSTALLED_HANDLERS.append(console_handler)

    _VERBOSE = bool(verbose)

    root_logger.info("=" * 60)
    root_logger.info(
        "FlashFrame logging initialized (debug=%s, verbose=%s)",
        debug_enabled,
        _VERBOSE,
    )
    root_logger.info("=" * 60)


_SHORT_NAME_OVERRIDES = {
    "rendering.overlay_controller": "rendering.overlay",
    "engine.cycle_driver": "engine.cycle",
    "core.threading.manager": "threading.manager",
}


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with optional short-name overrides for noisy modules."""
    actual = _SHORT_NAME_OVERRIDES.get(name, name)
    return logging.getLogger(actual)


def is_verbose_logging() -> bool:
    """Return True when verbose debug logging is enabled globally."""

    return _VERBOSE
