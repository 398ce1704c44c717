import logging

ROOT_LOGGER = "exam_handlers"

_configured = False


def configure(level: str = "INFO") -> logging.Logger:
    """Attach a single stream handler to the package logger"""
    global _configured
    logger = logging.getLogger(ROOT_LOGGER)
    if not _configured and not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    _configured = True
    return logger


def get_logger(name: str) -> logging.Logger:
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
