import logging
from typing import Optional

from reportsync.config.settings import settings


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
