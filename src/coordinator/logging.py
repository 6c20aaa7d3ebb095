import logging


def configure_logging(level: str = "INFO") -> None:
    """
    Configure logging for the coordination service.

    Per-frame access logs from uvicorn are kept at WARNING unless we are
    debugging; displays send edge events every detection cycle.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if numeric_level > logging.DEBUG:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
