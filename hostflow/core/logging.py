import logging
import os
from typing import Optional

LOG_DIR = os.getenv("HOSTFLOW_LOG_DIR", "logs")
LOG_FILE = "hostflow.log"
LOG_FORMAT = "[%(asctime)s] | [%(levelname)s] | [%(name)s] | %(message)s"


def _default_level() -> int:
    level = logging.getLevelName(os.getenv("HOSTFLOW_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str = "hostflow", level: Optional[int] = None) -> logging.Logger:
    """
    Named logger writing to the console and to `LOG_DIR/hostflow.log`.

    Handlers are attached on first use only, so calling this at import time
    from every module is fine. Credentials must never be passed in messages.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else _default_level())
    logger.propagate = False

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(LOG_DIR, LOG_FILE), mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
