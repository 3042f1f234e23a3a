"""
MoodTunes Main Application

Entry point: loads ``.env``, builds the configuration and serves the FastAPI
application with uvicorn.
"""

import uvicorn
from dotenv import load_dotenv

from .api.backend import create_app
from .models.config_models import SystemConfig

# Load environment variables from .env file
load_dotenv()

config = SystemConfig.from_env()
app = create_app(config)


def run() -> None:
    """Serve the application on the configured host and port."""
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower()
    )


if __name__ == "__main__":
    run()
