"""
Logging setup for Remote Bridge

All bridge modules log through children of the ``remote_bridge`` logger;
this module owns its handlers.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER = 'remote_bridge'

CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'

# Socket.IO and aiohttp log every packet and request at INFO
NOISY_LOGGERS = ('socketio', 'engineio', 'aiohttp.access', 'asyncio')

_SIZE_UNITS = (('GB', 1024 ** 3), ('MB', 1024 ** 2), ('KB', 1024), ('B', 1))


def _level(name: str) -> int:
    return getattr(logging, name.upper())


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(log_file: str, max_bytes: int, backup_count: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """Attach console and optional rotating file handlers to the bridge logger

    Calling it again replaces the handlers from the previous call, so a
    reloaded configuration takes effect without duplicating output.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(_level(level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(_level(level)))
    if log_file:
        logger.addHandler(_file_handler(log_file, max_bytes, backup_count))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Logging initialized at {level.upper()}"
                 + (f", writing to {log_file}" if log_file else ""))
    return logger


def parse_size(size: str) -> int:
    """Convert a human size string such as '10MB' into bytes"""
    text = str(size).strip().upper()

    for suffix, factor in _SIZE_UNITS:
        if text.endswith(suffix):
            return int(float(text[:-len(suffix)].strip()) * factor)

    return int(text)


def get_logger(name: str) -> logging.Logger:
    """Child of the bridge logger, e.g. ``get_logger('relay')``"""
    return logging.getLogger(f'{ROOT_LOGGER}.{name}')
