#!/usr/bin/env python3
"""
Message board server
Serves the board API and its landing pages
"""
import logging
import os
import sys
import uvicorn
from config import DEFAULT_HOST, DEFAULT_PORT, LOG_FILE, LOG_LEVEL
from logging_config import setup_logging

logger = logging.getLogger("run_server")


def main():
    # Change to the directory containing this script
    script_dir = os.path.dirname(os.path.abspath(__file__))
    os.chdir(script_dir)
    setup_logging(LOG_LEVEL, LOG_FILE)

    logger.info("Starting message board server on http://%s:%d", DEFAULT_HOST, DEFAULT_PORT)
    logger.info("API endpoints under /api/threads/{board} and /api/replies/{board}")

    try:
        from app import app

        uvicorn.run(
            app,
            host=DEFAULT_HOST,
            port=DEFAULT_PORT,
            reload=False,
            access_log=True
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Error starting server")
        sys.exit(1)


if __name__ == "__main__":
    main()
