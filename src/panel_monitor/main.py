"""Panel Monitor application entry point and lifecycle orchestrator.

Startup sequence:
  config → logging → SQLite → API app → uvicorn
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import sys
from pathlib import Path

from panel_monitor import __version__
from panel_monitor.config.manager import ConfigManager
from panel_monitor.config.schema import AppConfig
from panel_monitor.db.engine import close_db, init_db
from panel_monitor.db.repository import Repository
from panel_monitor.logging.structured import setup_logging

logger = logging.getLogger(__name__)


class Application:
    """Owns the database connection and the HTTP server."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self._running = False
        self._server = None

    async def start(self) -> None:
        """Open the database and serve the API until stopped."""
        logger.info("Starting Panel Monitor v%s", __version__)
        self._running = True

        # ── 1. Database ──────────────────────────────────────
        db = await init_db(self.config.db.path)
        repo = Repository(db)
        for panel in self.config.panels:
            logger.info(
                "Panel %s (%s): %d stored readings",
                panel.id, panel.name, await repo.count_readings(panel.id),
            )

        # ── 2. API server ────────────────────────────────────
        from panel_monitor.dashboard.app import create_app

        app = create_app(self.config, repo)

        import uvicorn

        uvi_config = uvicorn.Config(
            app,
            host=self.config.dashboard.host,
            port=self.config.dashboard.port,
            log_level="warning",
        )
        server = uvicorn.Server(uvi_config)
        # Keep process signal handling in main() so Ctrl+C behaviour is predictable.
        server.install_signal_handlers = lambda: None
        self._server = server

        logger.info(
            "API available at http://%s:%d (timezone %s)",
            self.config.dashboard.host,
            self.config.dashboard.port,
            self.config.series.timezone,
        )

        # Server.serve() blocks until shutdown
        await server.serve()

    async def stop(self) -> None:
        """Stop the server and close the database."""
        if not self._running:
            return

        logger.info("Shutting down Panel Monitor")
        self._running = False

        if self._server is not None:
            self._server.should_exit = True

        await close_db()
        self._server = None
        logger.info("Shutdown complete")


def main() -> None:
    """Entry point for the application."""
    defaults_path = Path(os.environ.get("PANEL_MONITOR_DEFAULTS", "config.defaults.yaml"))
    user_path = Path(os.environ.get("PANEL_MONITOR_CONFIG", "config.yaml"))

    config = ConfigManager(defaults_path, user_path).load()

    setup_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        log_file=config.logging.file,
    )

    app = Application(config)
    stop_requested = False
    signal_count = 0

    async def _run() -> None:
        try:
            await app.start()
        finally:
            if app._running:
                with contextlib.suppress(Exception):
                    await app.stop()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def _request_stop() -> None:
        nonlocal stop_requested, signal_count
        signal_count += 1
        if signal_count >= 2:
            os._exit(130)
        if stop_requested or loop.is_closed():
            return
        stop_requested = True
        loop.call_soon_threadsafe(lambda: asyncio.create_task(app.stop()))

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _request_stop)
    else:
        signal.signal(signal.SIGINT, lambda *_: _request_stop())
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, lambda *_: _request_stop())

    try:
        loop.run_until_complete(_run())
    except KeyboardInterrupt:
        _request_stop()
        with contextlib.suppress(Exception):
            loop.run_until_complete(app.stop())
    finally:
        pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            with contextlib.suppress(Exception):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        loop.close()


if __name__ == "__main__":
    main()
