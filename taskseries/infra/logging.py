from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from taskseries.config import SETTINGS, PROJECT_ROOT

LOG_FORMAT = "%(asctime)s %(levelname)s [{component}] %(name)s %(message)s"


def setup_logging(component: str = "desktop") -> None:
    """Log to ``taskseries-<component>.log`` and the console.

    The desktop window and the HTTP API each keep their own rotating file so a
    backfill run can be traced to the entry point that started it.
    """
    log_dir = PROJECT_ROOT / SETTINGS.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        LOG_FORMAT.format(component=component),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        log_dir / f"taskseries-{component}.log",
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logging.basicConfig(
        level=SETTINGS.log_level.upper(),
        handlers=[file_handler, console_handler],
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
