import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

_LOGGERS: dict[str, logging.Logger] = {}

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_formatter = logging.Formatter(LOG_FORMAT)

# One per-run log file shared by every named logger
_file_handler: Optional[logging.FileHandler] = None


def _get_file_handler() -> Optional[logging.FileHandler]:
    global _file_handler
    log_dir = os.getenv("LOG_DIR")
    if not log_dir:
        return None
    if _file_handler is None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        _file_handler = logging.FileHandler(path / f"election-{timestamp}.log", encoding="utf-8")
        _file_handler.setFormatter(_formatter)
    return _file_handler


def get_logger(name: str) -> logging.Logger:
    """
    Create or retrieve a named logger.

    Console output always; the shared per-run log file is attached when LOG_DIR is set.
    The level comes from LOG_LEVEL (default INFO).
    """
    if name in _LOGGERS:
        return _LOGGERS[name]

    logger = logging.getLogger(name)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    console = logging.StreamHandler()
    console.setFormatter(_formatter)
    logger.addHandler(console)

    file_handler = _get_file_handler()
    if file_handler is not None:
        logger.addHandler(file_handler)

    logger.propagate = False
    _LOGGERS[name] = logger
    return logger
