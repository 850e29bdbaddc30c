"""
Canonical entry point for airwatch_core package.

This package contains domain models, application services, and configuration.
The runnable services live in airwatch_server and airwatch_client.
"""

import sys

from airwatch_core.config.environments import get_settings


def main() -> None:
    """Main entry point for airwatch_core package."""
    print("airwatch_core - Domain and application layer package")
    print("This package is not intended to be run directly.")
    print("Use the specific service packages (airwatch_server, airwatch_client) instead.")

    try:
        config = get_settings()
        print("\nCurrent configuration:")
        print(f"Environment: {config.ENVIRONMENT}")
        print(f"Store: {config.STORE_BACKEND} ({config.STORE_MATCH} matching)")
        print(f"API: {config.API_HOST}:{config.API_PORT}")
        print(f"Simulation: {config.SIMULATION_ENABLED} every {config.SIMULATION_INTERVAL_SEC}s")
    except Exception as e:
        print(f"Could not load configuration: {e}")

    sys.exit(0)


if __name__ == "__main__":
    main()
