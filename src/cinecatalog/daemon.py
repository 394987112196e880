"""Daemon orchestrator for the cinecatalog HTTP API."""

import signal
import sys

import uvicorn

from cinecatalog.api.app import create_app
from cinecatalog.config import Config
from cinecatalog.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


class DaemonOrchestrator:
    """Orchestrates the API server lifecycle."""

    def __init__(self, config: Config):
        """Initialize daemon orchestrator.

        Loads the catalog from the configured data directory.

        Args:
            config: Application configuration
        """
        self.config = config
        self.app = create_app(config)
        self.should_exit = False

    def handle_signal(self, signum, frame):
        """Handle shutdown signals."""
        logger.info("Received shutdown signal", signal=signum)
        self.should_exit = True

    def run(self):
        """Run the FastAPI server with uvicorn."""
        signal.signal(signal.SIGINT, self.handle_signal)
        signal.signal(signal.SIGTERM, self.handle_signal)

        logger.info(
            "Starting daemon",
            host=self.config.api.host,
            port=self.config.api.port,
            data_dir=self.config.catalog.data_dir,
        )

        try:
            uvicorn.run(
                self.app,
                host=self.config.api.host,
                port=self.config.api.port,
                log_level=self.config.logging.level,
                access_log=False,  # Upload requests are logged by the middleware
            )
        except KeyboardInterrupt:
            logger.info("Daemon interrupted by user")
        except Exception as e:
            logger.exception("Daemon error", error=str(e))
            sys.exit(1)
        finally:
            logger.info("Daemon stopped")


def start_daemon(config: Config):
    """Start the daemon.

    Args:
        config: Application configuration
    """
    setup_logging(config.logging)

    daemon = DaemonOrchestrator(config)
    daemon.run()
