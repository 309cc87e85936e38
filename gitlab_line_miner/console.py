"""Thread-safe printing and logging helpers shared by the worker threads."""
import logging
import sys
from threading import Lock
from typing import Optional

from tqdm import tqdm


LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
LOGGER_NAME = "gitlab_line_miner"

print_lock = Lock()
log_lock = Lock()


def safe_print(*args, **kwargs):
    """Thread-safe print function that keeps the progress bar intact."""
    with print_lock:
        tqdm.write(*args, **kwargs)


def setup_logging(log_file: Optional[str] = None) -> logging.Logger:
    """
    Setup logging configuration.

    Log lines go to stdout, interleaved with progress messages. When
    ``log_file`` is given they are also written there.
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    return logging.getLogger(LOGGER_NAME)


def log_message(logger, level, message):
    """Thread-safe logging function. A ``None`` logger discards the message."""
    if logger is None:
        return
    with log_lock:
        if level == 'info':
            logger.info(message)
        elif level == 'warning':
            logger.warning(message)
        elif level == 'error':
            logger.error(message)
        elif level == 'debug':
            logger.debug(message)
