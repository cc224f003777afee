import logging
from typing import Optional

from .settings import get_settings


def setup_logging(level: Optional[str] = None) -> None:
    s = get_settings()
    log_level = (level or s.logging.level or "INFO").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO), format=s.logging.format)
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
