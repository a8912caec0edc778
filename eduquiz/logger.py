"""Logging do pacote eduquiz."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Configura o logger raiz do pacote (idempotente).

    Args:
        level: Nome do nivel (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Logger ``eduquiz`` configurado
    """
    logger = logging.getLogger("eduquiz")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_eduquiz", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._eduquiz = True
        logger.addHandler(handler)

    return logger
