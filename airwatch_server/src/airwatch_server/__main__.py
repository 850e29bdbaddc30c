"""
Canonical entry point for the airwatch_server package.

Usage:
    airwatch-server api --environment development
    airwatch-server setup-db --environment development
"""

import argparse
import logging
import os
import sys

import uvicorn
from airwatch_core.config.environments import get_settings


def setup_logging(config) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def run_api_server(args: argparse.Namespace) -> None:
    """Run the FastAPI server with the realtime channel."""
    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    host = args.host or config.API_HOST
    port = args.port or config.API_PORT
    reload = args.reload and args.environment != "production"

    log.info("Starting API server...")
    log.info("Environment: %s", args.environment)
    log.info("Host: %s", host)
    log.info("Port: %s", port)
    log.info("Store backend: %s", config.STORE_BACKEND)
    log.info("Simulation: %s", "on" if config.SIMULATION_ENABLED else "off")

    uvicorn.run(
        "airwatch_server.adapters.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=config.LOG_LEVEL.lower(),
    )


def setup_database(args: argparse.Namespace) -> None:
    """Create the reading tables for the sql store backend."""
    from airwatch_server.adapters.db.session import create_session_factory

    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    log.info("Setting up database for %s environment...", args.environment)
    create_session_factory(config.DATABASE_URL)
    log.info("Database setup completed successfully")


def main() -> None:
    """Main entry point for airwatch_server commands."""
    parser = argparse.ArgumentParser(description="AirWatch Server - API, realtime channel and database")
    parser.add_argument(
        "--environment",
        choices=["production", "development", "testing"],
        default="development",
        help="Environment to run in",
    )
    parser.add_argument("command", choices=["api", "setup-db"], help="Command to run")
    parser.add_argument("--host", help="Host to bind to (overrides config)")
    parser.add_argument("--port", type=int, help="Port to bind to (overrides config)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload (development only)")

    args = parser.parse_args()

    # read by get_settings()
    os.environ["AIRWATCH_ENV"] = args.environment

    if args.command == "api":
        run_api_server(args)
    elif args.command == "setup-db":
        setup_database(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
