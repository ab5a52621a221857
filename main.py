import uvicorn

from genrelay.config import Settings
from genrelay.core.logging_setup import setup_logging


def main():
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    uvicorn.run(
        "genrelay.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
