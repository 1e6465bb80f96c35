import sys
from loguru import logger
from src.config import LOG_LEVEL


def configure_logging(level: str = LOG_LEVEL):
    """Replace loguru's default sink with one honouring ``LOG_LEVEL``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        backtrace=False,
    )
    return logger
