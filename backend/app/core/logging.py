import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> None:
    """Attach a single stdout handler to the root logger.

    Safe to call more than once; an existing handler installed by this
    function is replaced rather than duplicated.
    """
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    for handler in list(root.handlers):
        if getattr(handler, "_app_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    handler._app_handler = True
    root.addHandler(handler)

    # Keep SQL echo out of the application log unless explicitly requested
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
