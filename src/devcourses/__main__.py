"""Run the DevCourses API server: python -m devcourses."""

import uvicorn

from devcourses.api import create_app
from devcourses.config import Settings
from devcourses.logging import setup_logging


def main() -> None:
    """Start the API server with settings from the environment."""
    setup_logging()
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
