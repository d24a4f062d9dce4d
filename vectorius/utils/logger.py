"""Logging setup shared by the chat pipeline, storage and cleanup modules."""
import logging
import os

# Client libraries that log every HTTP request at INFO, including the
# signed attachment URLs and Azure deployment paths.
_CHATTY_LIBRARIES = ("httpx", "httpcore", "openai")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a ``vectorius`` logger.

    Level comes from VECTORIUS_LOG_LEVEL (default INFO). Below DEBUG the HTTP
    client libraries are held at WARNING.
    """
    level_str = os.getenv("VECTORIUS_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_str, logging.INFO)
    # Configure root logger only once.
    if not logging.getLogger().handlers:
        logging.basicConfig(
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            level=level,
        )
        if level > logging.DEBUG:
            for lib in _CHATTY_LIBRARIES:
                logging.getLogger(lib).setLevel(logging.WARNING)
    logger = logging.getLogger(name or "vectorius")
    logger.setLevel(level)
    return logger
