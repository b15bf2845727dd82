"""
Logging setup for the Recruit Tracker API.

All application loggers hang off the ``recruit_tracker`` logger, which gets a
console handler and, outside of tests, a daily rotating file plus an
errors-only file under ``LOG_DIR``.
"""
import functools
import logging
import logging.config
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

LOGGER_PREFIX = "recruit_tracker"

FORMATS = {
    "simple": "%(levelname)s - %(name)s - %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)-40s | %(funcName)-20s:%(lineno)-4d | %(message)s",
}

# (level, console, file, format) per ENVIRONMENT value
ENVIRONMENT_PROFILES = {
    "production": (None, True, True, "detailed"),
    "development": ("DEBUG", True, True, "detailed"),
    "testing": ("WARNING", True, False, "simple"),
}


def _rotating_file(path: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filename": str(path),
        "maxBytes": 10 * 1024 * 1024,
        "backupCount": 5,
        "encoding": "utf8",
    }


def setup_logging(
    level: str = "INFO",
    enable_console: bool = True,
    enable_file: bool = True,
    format_style: str = "detailed"
) -> None:
    """
    Apply the logging configuration.

    Args:
        level: Level for application loggers (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Log to stdout
        enable_file: Log to files under LOG_DIR
        format_style: 'simple' or 'detailed' console format
    """
    handlers: Dict[str, Dict[str, Any]] = {}
    if enable_console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": format_style if format_style in FORMATS else "detailed",
            "stream": "ext://sys.stdout",
        }
    if enable_file:
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime('%Y%m%d')
        handlers["file"] = _rotating_file(log_dir / f"recruit_tracker_{stamp}.log", level)
        handlers["error_file"] = _rotating_file(log_dir / f"recruit_tracker_errors_{stamp}.log", "ERROR")

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {name: {"format": fmt, "datefmt": "%Y-%m-%d %H:%M:%S"} for name, fmt in FORMATS.items()},
        "handlers": handlers,
        "loggers": {
            LOGGER_PREFIX: {"level": level, "handlers": list(handlers), "propagate": False},
            "uvicorn": {"level": "INFO", "handlers": [h for h in handlers if h != "error_file"], "propagate": False},
        },
    })

    get_logger("logging").info(
        f"Logging configured - Level: {level}, Console: {enable_console}, File: {enable_file}"
    )


def configure_for_environment():
    """Pick a logging profile from ENVIRONMENT (default development) and LOG_LEVEL"""
    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    level, console, to_file, style = ENVIRONMENT_PROFILES.get(environment, (None, True, True, "detailed"))
    setup_logging(level=level or log_level, enable_console=console, enable_file=to_file, format_style=style)


def get_logger(name: str) -> logging.Logger:
    """Logger under the application prefix; module names already carrying it are used as-is."""
    if name == LOGGER_PREFIX or name.startswith(f"{LOGGER_PREFIX}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")


def log_api_call(operation: str):
    """Decorator for async endpoints: logs start, duration and failure."""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(f"api.{func.__name__}")
            start_time = time.time()
            logger.info(f"API {operation} started")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(f"API {operation} failed after {time.time() - start_time:.3f}s: {e}")
                raise
            logger.info(f"API {operation} completed in {time.time() - start_time:.3f}s")
            return result

        return wrapper
    return decorator


class PerformanceMonitor:
    """Times a block and logs it, as a warning past ``threshold_ms``"""

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed_ms = (time.time() - self.start_time) * 1000

        if exc_type is not None:
            self.logger.error(f"{self.operation_name} failed after {elapsed_ms:.2f}ms: {exc_val}")
        elif elapsed_ms > self.threshold_ms:
            self.logger.warning(f"{self.operation_name} took {elapsed_ms:.2f}ms (threshold {self.threshold_ms}ms)")
        else:
            self.logger.debug(f"{self.operation_name} completed in {elapsed_ms:.2f}ms")
        return False
