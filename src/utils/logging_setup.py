# ========================
# src/utils/logging_setup.py
# ========================

"""
Logging Configuration

Centralized logging setup for the restaurant insights pipeline.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

# Modules that log one DEBUG line per dropped or excluded row.
ROW_LEVEL_LOGGERS = (
    'src.restaurant_insights.cleaning',
    'src.restaurant_insights.enrichment',
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str = "INFO",
                  log_file: Optional[str] = None,
                  log_dir: str = "logs",
                  row_details: bool = False) -> Optional[Path]:
    """
    Set up logging configuration for the pipeline.

    Args:
        log_level (str): Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file (str): Optional log file name, written under log_dir at DEBUG
        log_dir (str): Directory for log files
        row_details (bool): Keep the per-row DEBUG messages of cleaning and
            enrichment; they are capped at INFO otherwise

    Returns:
        Path: The log file path, or None when logging to the console only
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_path = None
    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_path = log_path / log_file
        file_handler = logging.FileHandler(file_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)  # File gets all messages
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # The root must pass DEBUG records through when a file wants them
    root_logger.setLevel(logging.DEBUG if file_path else level)

    row_level = logging.NOTSET if row_details else logging.INFO
    for name in ROW_LEVEL_LOGGERS:
        logging.getLogger(name).setLevel(row_level)

    if file_path:
        logging.info(f"Logging to file: {file_path}")
    logging.info(f"Logging initialized - Level: {log_level}, row details: {row_details}")
    return file_path
