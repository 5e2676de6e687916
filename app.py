"""
Main application entry point for the Camp Ecosystem API.

This module is a wrapper around the main application defined in camp_ecosystem.app.
It provides a convenient entry point for running the API server.
"""

import uvicorn

# Import the main application
from camp_ecosystem.app import app as camp_ecosystem_app
from camp_ecosystem.config import get_server_config

# Re-export the application
app = camp_ecosystem_app

if __name__ == "__main__":
    # Get server configuration
    server_config = get_server_config()

    # Run the application directly when script is executed
    uvicorn.run(
        "camp_ecosystem.app:app",
        host=server_config.host,
        port=server_config.port,
        log_level=server_config.log_level.lower(),
        reload=server_config.debug
    )
