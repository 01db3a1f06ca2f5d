import asyncio
import logging
import sys

logger = logging.getLogger("ExceptionHandler")


def global_exception_hook(exctype, value, tb):
    """
    Catches any uncaught exceptions in the application and logs them.
    No dialog is shown; the traceback goes to the log file and console.
    """
    # Pending tasks are cancelled on shutdown.
    if issubclass(exctype, asyncio.CancelledError):
        logger.debug("Suppressing asyncio.CancelledError during shutdown.")
        return

    if issubclass(exctype, KeyboardInterrupt):
        sys.__excepthook__(exctype, value, tb)
        return

    logger.critical("An unexpected error occurred: %s", value, exc_info=(exctype, value, tb))


def setup_exception_hook():
    """Sets the global exception hook."""
    sys.excepthook = global_exception_hook
