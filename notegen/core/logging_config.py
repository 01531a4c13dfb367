import logging

from rich.logging import RichHandler

#logging_config.py
DEFAULT_LOGGING_LEVEL = "INFO"


def setup_logging(level: str = DEFAULT_LOGGING_LEVEL):
    """
    Set up the logging configuration.

    Calling it again replaces the root handlers, so entry points re-run it with
    `Config.LOGGING_LEVEL` once the config is loaded.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                rich_tracebacks=True,
                markup=True,
                show_path=True,
                keywords=RichHandler.KEYWORDS
                + [
                    "step",
                    "agent",
                    "keyword",
                    "status",
                ],
            )
        ],
        force=True,
    )

    # Optionally, set higher logging levels for verbose libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("openai.agents").setLevel(logging.WARNING)


# Initialize logging with the default level when this module is imported
setup_logging()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: The name of the logger.

    Returns:
        A logger instance.
    """
    return logging.getLogger(name)
