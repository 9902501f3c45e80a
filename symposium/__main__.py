"""Run the Symposium server: ``python -m symposium``."""

import uvicorn

from symposium.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "symposium.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
