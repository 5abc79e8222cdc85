import logging
import os
from typing import Optional

from pollgate.core.constants import LoggingConfig


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once at startup. LOG_LEVEL overrides the default level."""
    level = (level or os.getenv("LOG_LEVEL", LoggingConfig.DEFAULT_LOG_LEVEL)).upper()

    logging.basicConfig(
        level=level,
        format=LoggingConfig.LOG_FORMAT,
        datefmt=LoggingConfig.DATE_FORMAT,
    )
    # SQL echo is noisy; keep it at warnings unless asked for
    logging.getLogger("sqlalchemy.engine").setLevel(LoggingConfig.DATABASE_LOG_LEVEL)
    # passlib logs a harmless traceback when probing newer bcrypt builds
    logging.getLogger("passlib").setLevel(logging.ERROR)
