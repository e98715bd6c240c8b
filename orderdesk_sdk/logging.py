import logging

def get_logger(name: str, level: int = logging.INFO):
    """
    Named logger with a single console handler.
    API clients and orchestration components log through this so request
    lines and step transitions share one format.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
