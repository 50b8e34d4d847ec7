"""Storefront web server - Entry point."""

import argparse
import logging

from . import settings
from .settings import load_settings

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Storefront and admin web UI")
    parser.add_argument("--port", type=int, default=settings.WEB_PORT, help="Port to run on")
    parser.add_argument("--host", default=settings.WEB_HOST, help="Host to bind to")
    parser.add_argument("--api-url", default=None, help="Backend API base URL")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format=settings.LOG_FORMAT)

    import uvicorn

    from .web import app, configure

    config = configure(load_settings().with_overrides(api_url=args.api_url)).settings

    logger.info(f"Starting storefront on {args.host}:{args.port}")
    logger.info(f"Backend API: {config.api_url}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
