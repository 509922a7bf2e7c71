"""
Logging for StreakMind.

Everything logs through the one ``streakmind`` logger. Its level, line format
and optional log file come from the ``logging`` section of the settings.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from streakmind.core.config import LoggingConfig, settings

LOGGER_NAME = "streakmind"

_logger: Optional[logging.Logger] = None


def configure_logging(config: LoggingConfig, logs_path: Path) -> logging.Logger:
    """Rebuild the handlers of the streakmind logger from a logging config section."""
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    log.propagate = False

    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)

    if config.to_file:
        log_file = Path(logs_path) / config.file_name
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            log.addHandler(file_handler)
        except OSError as e:
            log.warning(f"File logging disabled, cannot open {log_file}: {e}")

    return log


def get_logger() -> logging.Logger:
    """Get the shared logger, configuring it on first use."""
    global _logger
    if _logger is None:
        _logger = configure_logging(settings.logging, settings.paths.logs)
    return _logger


logger = get_logger()
