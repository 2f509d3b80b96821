import logging
import sys

from volunteer_slots.config import settings

_HANDLER_NAME = "volunteer_slots.console"


def setup_logging():
    """Configure application logging"""
    logger = logging.getLogger()
    logger.setLevel(settings.LOG_LEVEL)

    # Idempotent: handlers installed by a test runner or process manager stay
    if any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(console_handler)

    # Silence noisy libraries
    logging.getLogger('uvicorn').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
