# fletes/utils/logging.py

import logging
import os

_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Instala el handler una sola vez; el nivel se aplica en cada llamada."""
    global _CONFIGURED

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric = getattr(logging, level, logging.INFO)

    if not _CONFIGURED:
        logging.basicConfig(
            level=numeric,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
        _CONFIGURED = True

    logging.getLogger().setLevel(numeric)


def get_logger(name: str) -> logging.Logger:
    if not _CONFIGURED:
        configure_logging()
    return logging.getLogger(f"fletes.{name}")
