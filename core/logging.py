"""
Logging configuration
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from core.config import settings, Settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_FILE_NAME = "staff_export.log"


def setup_logging(config: Optional[Settings] = None) -> Path:
    """
    Configure application logging.

    Logs go to stdout and to a file in LOGS_PATH. The log directory is
    created before any handler is attached.

    Returns:
        Path of the log file
    """
    config = config or settings

    # Get log level from settings
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    log_dir = Path(config.LOGS_PATH) if config.LOGS_PATH else Path.cwd() / "Logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8")
        ],
        force=True
    )

    # Reduce third-party noise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("paramiko").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {config.LOG_LEVEL} level ({log_file})")
    return log_file
