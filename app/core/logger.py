"""Logger configuration for the Life Hub backend.

Development gets colored human-readable lines on stderr; production
(``APP_ENV=production``) gets one JSON object per line so the context passed
as keyword arguments (``source=``, ``event_id=``...) stays queryable.
"""

import sys
from pathlib import Path

from loguru import logger

from app.config.settings import Settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> {extra}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} {extra}"


def setup_logger(
    config: Settings,
    rotation: str = "10 MB",
    retention: str = "7 days",
    level: str | None = None,
) -> None:
    """Configure loguru sinks from the application settings.

    Args:
        config: Settings providing log_level, log_file and app_env
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")
        level: Overrides config.log_level (the CLI's --verbose)
    """
    level = level or config.log_level
    serialize = config.is_production

    logger.remove()

    if serialize:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
            serialize=serialize,
        )

    logger.info("Logger initialized", level=level, env=config.app_env, serialize=serialize)
