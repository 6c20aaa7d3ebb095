import logging


def configure_logging(level: str = "INFO") -> None:
    """Root logger for the display agent; the websockets client stays quiet below DEBUG."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logging.getLogger("websockets").setLevel(logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING)
