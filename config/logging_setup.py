from loguru import logger

from config.settings import settings


def setup_logging(log_file: str = None, level: str = None) -> None:
    """Attach the rotating file sink used by scripts and the host application"""
    logger.add(
        log_file or settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=level or settings.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}"
    )
