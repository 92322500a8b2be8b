import logging
import sys
from logging import StreamHandler

from sae_register.config.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
    )
    # httpx logs every request line at INFO, including provider URLs with webinar ids
    logging.getLogger("httpx").setLevel(logging.WARNING)
