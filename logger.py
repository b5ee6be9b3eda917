import logging
import sys

from core.config import settings

LOGGER_NAME = "line_callbacks"


def configure_logger(debug: bool = False, log_file: str | None = None):
    level = logging.DEBUG if debug else logging.INFO
    if "gunicorn" in sys.modules:
        # When running with Gunicorn
        gunicorn_logger = logging.getLogger("gunicorn.error")
        logger = logging.getLogger(LOGGER_NAME)
        logger.handlers = gunicorn_logger.handlers  # Use Gunicorn handlers
        logger.setLevel(level)
    else:
        # For local development or when running without Gunicorn
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if log_file:
            handlers.append(logging.FileHandler(log_file, mode="a"))
        logging.basicConfig(
            level=logging.WARNING,
            format="%(asctime)s - %(levelname)s - %(message)s",
            handlers=handlers,
        )
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(level)
    # SDK and HTTP client chatter stays quiet unless it is a warning
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logger


# Create and export the logger
logger = configure_logger(settings.DEBUG_LOGGING, settings.LOG_FILE)
