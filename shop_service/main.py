"""Main application entry point."""
import logging

import uvicorn

from shop_service.app import create_app
from shop_service.config import PORT, Settings
from shop_service.logging_config import setup_logging

settings = Settings.from_env()

# Setup structured logging
setup_logging(settings.otlp_endpoint)
logger = logging.getLogger(__name__)

app = create_app(settings)


def run():
    """Serve the application with uvicorn."""
    logger.info(f"Server running on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
