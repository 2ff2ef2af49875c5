"""
Main entrypoint: run the scoring proxy API with uvicorn.

Env: API_HOST, API_PORT, LOG_LEVEL, RISKGRID_PIPELINE_ID, RISKGRID_SCORING_TIMEOUT_SEC.

Equivalent: uvicorn riskgrid.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured logging before other imports that may log
from riskgrid.riskgrid_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Start the FastAPI scoring proxy in the main thread."""
    from riskgrid.api_server.app import app
    from riskgrid.config.env import get_api_host, get_api_port
    import uvicorn

    api_host = get_api_host()
    api_port = get_api_port()
    logger.info("main_server_starting", host=api_host, port=api_port)
    uvicorn.run(app, host=api_host, port=api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
