"""Run the API with uvicorn: ``python -m image_uploader``."""

import uvicorn

from image_uploader.config import settings


def main() -> None:
    uvicorn.run(
        "image_uploader.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
