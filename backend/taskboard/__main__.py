from __future__ import annotations

import uvicorn

from .config import Settings
from .logging_setup import get_logger, setup_logging
from .main import create_app


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings)
    get_logger(__name__).info("starting_api", host=settings.host, port=settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
