import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure application logging on stdout.

    Safe to call on every Streamlit rerun; ``basicConfig`` is a no-op once
    the root logger has a handler.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve a namespaced logger.
    """
    return logging.getLogger(name)
