"""Command-line entry point for the Camp Ecosystem API server."""

import uvicorn

from camp_ecosystem.config import get_server_config


def main():
    """Run the Camp Ecosystem API server."""
    server_config = get_server_config()
    uvicorn.run(
        "camp_ecosystem.app:app",
        host=server_config.host,
        port=server_config.port,
        log_level=server_config.log_level.lower(),
        reload=server_config.debug
    )


if __name__ == "__main__":
    main()
