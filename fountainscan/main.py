"""Main entry point for the FountainScan backend."""

import asyncio
import logging
import signal
import sys

from .api import ApiServer
from .config import Config, load_config, validate_config
from .service import ScanService
from .storage import Database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)
logger = logging.getLogger(__name__)


class FountainScanApp:
    """Wires the scan service, database and API server together."""

    def __init__(self, config: Config):
        self.config = config
        self._stop_event = asyncio.Event()
        self._stop_lock = asyncio.Lock()
        self._stopped = False

        self.database = Database(config.database_path)
        self.service = ScanService(config)
        self.api = ApiServer(
            service=self.service,
            database=self.database,
            host=config.api_host,
            port=config.api_port,
        )

    async def start(self):
        """Start all components and wait for a stop request."""
        logger.info("Starting FountainScan...")

        await self.database.connect()
        logger.info("Database connected")

        await self.service.start()
        await self.api.start()

        snapshot = self.service.lists.snapshot()
        logger.info(
            "FountainScan running (whitelist=%s, blacklist=%s, blocking=%s)",
            len(snapshot.whitelist),
            len(snapshot.blacklist),
            self.service.settings.blocking_enabled,
        )
        await self._stop_event.wait()

    async def stop(self):
        """Stop all components (idempotent)."""
        async with self._stop_lock:
            if self._stopped:
                return
            self._stopped = True
            logger.info("Stopping FountainScan...")
            await self.api.stop()
            await self.service.stop()
            await self.database.close()
            self._stop_event.set()
            logger.info("FountainScan stopped")


async def run_app():
    """Run the FountainScan backend."""
    config = load_config()

    validation_errors = validate_config(config)
    if validation_errors:
        for err in validation_errors:
            logger.error(err)
        sys.exit(1)

    app = FountainScanApp(config)

    # Handle shutdown signals
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(app.stop()))

    try:
        await app.start()
    except KeyboardInterrupt:
        pass
    finally:
        await app.stop()


def main():
    """Entry point."""
    asyncio.run(run_app())


if __name__ == "__main__":
    main()
