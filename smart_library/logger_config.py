import sys

from loguru import logger

LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | '
    '<level>{level: <8}</level> | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - '
    '<level>{message}</level>'
)


def configure_logging(app):
    """Replace loguru's default sink with one honouring the app's LOG_LEVEL"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format=LOG_FORMAT,
        colorize=not app.config.get('TESTING', False),
        backtrace=app.config.get('DEBUG', False),
        diagnose=app.config.get('DEBUG', False),
    )
    return logger
