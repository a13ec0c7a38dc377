"""Process entry point: run the app under uvicorn with queue draining on exit."""

import logging
import sys
from types import FrameType

import uvicorn
from fastapi import FastAPI

from verify_proxy.config.settings import get_settings

logger = logging.getLogger(__name__)

STARTUP_FAILURE = 3


class DrainingServer(uvicorn.Server):
    """
    Uvicorn server that switches the app into draining mode on SIGINT/SIGTERM.

    Uvicorn then stops accepting connections, waits for in-flight requests and
    runs the lifespan shutdown, where the coordinator waits for the queue to
    empty before the process exits.
    """

    def __init__(self, config: uvicorn.Config, app: FastAPI):
        super().__init__(config)
        self.fastapi_app = app

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        coordinator = getattr(self.fastapi_app.state, "shutdown", None)
        if coordinator is not None:
            logger.info("Received signal %s", sig)
            coordinator.begin_draining()
        super().handle_exit(sig, frame)
        # The signal is fully handled here; uvicorn must not re-raise it on exit.
        captured = getattr(self, "_captured_signals", None)
        if captured:
            captured.clear()


def main() -> None:
    settings = get_settings()

    from verify_proxy.app import app

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,  # Logging is configured by the app
        proxy_headers=True,
    )
    server = DrainingServer(config, app)
    logger.info("Email verification proxy listening on http://%s:%d", settings.host, settings.port)
    server.run()
    if not server.started:
        sys.exit(STARTUP_FAILURE)


if __name__ == "__main__":
    main()
