"""Logging-Setup des Bots: Konsole plus Logdatei (LOG_FILE)."""
import logging
import sys

from app.core.config import settings


def setup_logging(log_file: str = None):
    """Configures logging to write to both console and a file."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file or settings.log_file, mode="a", encoding="utf-8"),
        ],
    )
    # Ensure specific loggers are also propagating or handled
    logging.getLogger("uvicorn").handlers = []  # Avoid double logging if uvicorn sets its own
    logging.getLogger("uvicorn").propagate = True
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.INFO)
