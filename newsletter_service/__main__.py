"""Run the API server: ``python -m newsletter_service``."""

import uvicorn

from newsletter_service.api.main import create_app
from newsletter_service.config import get_settings
from newsletter_service.telemetry import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(settings.application.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.application.host,
        port=settings.application.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
