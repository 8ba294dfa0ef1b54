"""
Centralized logging configuration for tweenline.

Uses rotating file handler with logs stored in a logs/ directory.
Includes colored console output for debug mode.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


_VERBOSE: bool = False
_PERF_METRICS_ENABLED: bool = False
_LOG_DIR: Path = Path.cwd() / "logs"


def _read_perf_env() -> None:
    global _PERF_METRICS_ENABLED
    raw = os.getenv("TWEENLINE_PERF_METRICS")
    if raw is None:
        return
    value = raw.strip().lower()
    if value in ("0", "false", "off", "no"):
        _PERF_METRICS_ENABLED = False
    elif value in ("1", "true", "on", "yes"):
        _PERF_METRICS_ENABLED = True


_read_perf_env()


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
    RENDER_COLOR = '\033[38;5;135m'   # Purple for render progress
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        original_levelname = record.levelname

        color = None
        if '[RENDER]' in str(record.msg):
            color = self.RENDER_COLOR
        elif record.levelname in self.COLORS:
            color = self.COLORS[record.levelname]

        if color is None:
            return super().format(record)

        record.levelname = f"{self.BOLD}{color}{record.levelname}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = original_levelname
        return f"{color}{message}{self.RESET}"


def get_log_dir() -> Path:
    """Return the directory used for log files.

    setup_logging() updates this when called with an explicit log_dir so the
    returned path matches the location used by the active RotatingFileHandler.
    """
    return _LOG_DIR


def setup_logging(debug: bool = False, verbose: bool = False,
                  log_dir: Optional[Path] = None) -> None:
    """
    Configure application logging with file rotation.

    Args:
        debug: If True, set log level to DEBUG and enable console output.
        verbose: When True, per-frame render progress is logged as well.
            Verbose mode also implies debug-level logging.
        log_dir: Directory for tweenline.log (defaults to ./logs).
    """
    global _VERBOSE, _LOG_DIR

    debug_enabled = debug or verbose
    if log_dir is not None:
        _LOG_DIR = Path(log_dir)

    log_dir_path = get_log_dir()
    log_dir_path.mkdir(parents=True, exist_ok=True)
    log_file = log_dir_path / "tweenline.log"

    level = logging.DEBUG if debug_enabled else logging.INFO

    # Aligned columns for logger name and level
    formatter = logging.Formatter(
        '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # File handler with rotation (1MB max, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    if debug_enabled and sys.stdout.isatty():
        console_handler.setFormatter(ColoredFormatter(
            '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s',
            datefmt='%H:%M:%S',
        ))
    else:
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s',
            datefmt='%H:%M:%S',
        ))
    console_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    if debug_enabled:
        root_logger.addHandler(console_handler)

    _VERBOSE = bool(verbose)

    root_logger.info("=" * 60)
    root_logger.info(
        "tweenline logging initialized (debug=%s, verbose=%s)",
        debug_enabled,
        _VERBOSE,
    )
    root_logger.info("=" * 60)


_SHORT_NAME_OVERRIDES = {
    "tweenline.animation.timeline": "tweenline.timeline",
    "tweenline.animation.property": "tweenline.property",
    "tweenline.animation.bindings": "tweenline.bindings",
    "tweenline.animation.easing": "tweenline.easing",
    "tweenline.animation.output": "tweenline.output",
}


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with optional short-name overrides for noisy modules."""
    actual = _SHORT_NAME_OVERRIDES.get(name, name)
    return logging.getLogger(actual)


def is_verbose_logging() -> bool:
    """Return True when verbose debug logging is enabled globally."""

    return _VERBOSE


def is_perf_metrics_enabled() -> bool:
    """Return True when PERF metrics/telemetry are enabled globally."""

    return _PERF_METRICS_ENABLED


def set_perf_metrics_enabled(enabled: bool) -> None:
    """Override the TWEENLINE_PERF_METRICS environment setting at runtime."""
    global _PERF_METRICS_ENABLED
    _PERF_METRICS_ENABLED = bool(enabled)
