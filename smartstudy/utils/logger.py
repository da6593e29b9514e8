"""
loguru setup for SmartStudy.

Two sinks, configured once on import: a coloured console sink and the
``settings.LOG_FILE`` sink, rotated and pruned per LOG_ROTATION and
LOG_RETENTION (JSON lines when LOG_JSON is on).  Each module binds its own
name so records say which service, store or client wrote them.
"""
import sys
from loguru import logger
from smartstudy.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} - {message}"

logger.remove()
logger.configure(extra={"name": "smartstudy"})

logger.add(
    sys.stderr,
    format=CONSOLE_FORMAT,
    level=settings.LOG_LEVEL,
    colorize=True
)

logger.add(
    settings.LOG_FILE,
    format=FILE_FORMAT,
    level=settings.LOG_LEVEL,
    rotation=settings.LOG_ROTATION,
    retention=settings.LOG_RETENTION,
    serialize=settings.LOG_JSON,
    encoding="utf-8"
)


def get_logger(name: str):
    """Logger whose records carry ``name`` (normally the module's __name__)"""
    return logger.bind(name=name)
