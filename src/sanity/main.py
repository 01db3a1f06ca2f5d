# src/sanity/main.py
import asyncio
import logging
import sys

import qasync
from PySide6.QtWidgets import QApplication, QMessageBox
from PySide6.QtCore import QTimer

from sanity.core.application import Application
from sanity.core.config import load_settings
from sanity.core.exceptions import ConfigurationError
from sanity.core.logging_config import configure_logging
from sanity.utils.exception_handler import setup_exception_hook

logger = logging.getLogger("main")


async def main_async_logic(app_instance: QApplication):
    """
    The main asynchronous coroutine for the application.
    """
    dashboard = None
    shutdown_future = asyncio.get_event_loop().create_future()
    shutdown_in_progress = False

    async def on_about_to_quit():
        nonlocal shutdown_in_progress
        if shutdown_in_progress: return
        shutdown_in_progress = True
        logger.info("Application is about to quit. Starting graceful shutdown...")
        if dashboard:
            try:
                await dashboard.shutdown()
            except Exception:
                logger.exception("Error during shutdown tasks")
        if not shutdown_future.done(): shutdown_future.set_result(True)
        logger.info("Graceful shutdown complete.")

    app_instance.aboutToQuit.connect(lambda: asyncio.create_task(on_about_to_quit()))

    try:
        settings = load_settings()
        configure_logging(settings.log_dir, settings.log_level)
        dashboard = Application(settings)
        await dashboard.initialize_async()
        dashboard.show()
        logger.info("Application ready and displayed.")
        await shutdown_future
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        QMessageBox.critical(
            None, "Configuration Error",
            f"SanityDashboard is not configured.\n\n{e}\n\n"
            "Set SUPABASE_URL and SUPABASE_ANON_KEY in the environment or in a .env file."
        )
    except Exception as e:
        logger.exception("CRITICAL ERROR during application startup")
        QMessageBox.critical(None, "Startup Error", f"Failed to start SanityDashboard.\n\nError: {e}")
    finally:
        logger.info("Main async logic has finished. Exiting.")
        # Pending asyncio tasks can keep the Qt loop alive.
        QTimer.singleShot(100, app_instance.quit)


def run():
    setup_exception_hook()
    app = QApplication(sys.argv)
    app.setApplicationName("SanityDashboard")
    app.setOrganizationName("SanityDashboard")

    qasync.run(main_async_logic(app))
    logger.info("Application has exited cleanly.")


if __name__ == "__main__":
    run()
