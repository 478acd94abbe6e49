"""Run the API server: ``python -m loopmerge``."""

import logging

import uvicorn

from loopmerge.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("loopmerge")
    logger.info("Upload directory: %s", settings.upload_dir)
    logger.info("Output directory: %s", settings.output_dir)
    uvicorn.run("loopmerge.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
