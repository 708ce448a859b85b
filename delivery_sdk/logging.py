import logging


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger with a single stream handler attached.

    Handlers are installed once per logger name, so repeated calls are cheap.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger
