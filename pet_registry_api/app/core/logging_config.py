"""
Logging setup for the registry.

``setup_logging`` is called once by ``create_app`` (and by the
command line tools).  It attaches a console handler, and a file handler
when ``LOG_FILE`` is configured, to the root logger.  Every module then
logs through ``logging.getLogger(__name__)``.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third party loggers that drown out registry messages at INFO.
NOISY_LOGGERS = ("urllib3", "uvicorn.access")


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path of a file that receives a copy of every record.
    quiet : Iterable[str]
        Logger names raised to ``WARNING`` unless ``level`` is ``DEBUG``.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured (pytest's caplog, a second create_app call).
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if numeric_level > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)
