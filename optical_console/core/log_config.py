import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_ROOT = "optical_console"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger. Safe to call more than once."""
    logger = logging.getLogger(_ROOT)
    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    if not any(getattr(h, "_optical_console", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._optical_console = True
        logger.addHandler(handler)
    return logger
