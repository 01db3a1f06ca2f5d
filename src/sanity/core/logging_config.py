# src/sanity/core/logging_config.py
import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - [%(levelname)s] - %(name)s - %(message)s"

# Levels used on the event bus that the logging module does not know by name.
_EVENT_LEVELS = {
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "debug": logging.DEBUG,
    "info": logging.INFO,
}


def configure_logging(log_dir: Path, level: str = "INFO"):
    """Sets up file and console logging for the application."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "sanity_dashboard.log"

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler()
        ]
    )
    logging.info("--------------------")
    logging.info("Sanity Dashboard started. Log file: %s", log_file)


def forward_log_message(source: str, level: str, message: str):
    """Event bus subscriber: hands 'log_message_received' events to the logging module."""
    logging.getLogger(source).log(_EVENT_LEVELS.get(level.lower(), logging.INFO), message)
