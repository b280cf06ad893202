"""Entry point for the PnL insights API server"""
import logging
import sys
import traceback

import uvicorn

from pnl_insights.api import create_app
from pnl_insights.config import settings

logging.basicConfig(level=settings.LOG_LEVEL, format='%(message)s')
logger = logging.getLogger(__name__)

def run() -> None:
    """Serve the API until interrupted."""
    try:
        safe_config = settings.model_dump(exclude={'COINGECKO_DEMO_API_KEY', 'GEMINI_API_KEY'})
        logger.info(f"Using configuration: {safe_config}")

        app = create_app(settings)
        logger.info(f"Server listening on http://{settings.HOST}:{settings.PORT}")
        uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())

    except Exception as e:
        logger.error(f"Error starting server: {e}")
        traceback.print_exc()
        sys.exit(1)

if __name__ == "__main__":
    run()
