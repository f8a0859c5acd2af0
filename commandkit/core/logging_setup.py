"""
Logging setup for bots running CommandKit
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 32 * 1024 * 1024  # 32 MiB
LOG_BACKUP_COUNT = 5

MANAGED_LOGGERS = ('discord', 'commandkit')


def setup_logging(level: str = 'INFO', log_file_path: Optional[Union[str, Path]] = None) -> None:
    """
    Attach console (and optionally rotating file) handlers to the discord and
    commandkit loggers.

    Args:
        level: Log level name for both loggers
        log_file_path: Optional file to write rotated logs to
    """
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = [logging.StreamHandler()]
    if log_file_path:
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=log_file_path,
            encoding='utf-8',
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT
        ))

    for handler in handlers:
        handler.setFormatter(formatter)

    for name in MANAGED_LOGGERS:
        target = logging.getLogger(name)
        target.setLevel(level.upper())
        for handler in handlers:
            target.addHandler(handler)

    # Gateway chatter is only useful when debugging discord.py itself
    logging.getLogger('discord.http').setLevel(logging.INFO)
    logging.getLogger('discord.gateway').setLevel(logging.INFO)
