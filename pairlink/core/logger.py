import logging
import os
import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

from pairlink.core.config import Environment, settings

if TYPE_CHECKING:
    from loguru import Record

# Set by LoggingMiddleware for the duration of one request
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_DIR = Path("logs")
LOG_FILE = LOG_DIR / "app.log"

# stdlib numeric levels (what LOG_LEVEL holds) to loguru level names
LOG_LEVELS = {
    50: "CRITICAL",
    40: "ERROR",
    30: "WARNING",
    20: "INFO",
    10: "DEBUG",
    5: "TRACE",
    0: "NOTSET",
}

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>PID:{extra[process_id]}</magenta> | "
    "<yellow>ReqID:{extra[request_id]}</yellow> | "
    "<cyan>{name}:{function}:{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss!UTC} | "
    "{level: <8} | "
    "PID:{extra[process_id]} | "
    "ReqID:{extra[request_id]} | "
    "{name}:{function}:{line} | "
    "{message}"
)


def correlation_filter(record: "Record") -> bool:
    """
    Stamp every record with the request id and the worker PID.

    Each worker holds its own claim cache, so the PID tells which process saw a
    pair-claim and which one answered the poll.

    Args:
        record (Record): Log record from Loguru.

    Returns:
        bool: Always True, nothing is filtered out.
    """
    record["extra"]["request_id"] = request_id_var.get() or str(uuid.uuid4())[:8]
    record["extra"]["process_id"] = os.getpid()

    return True


class InterceptHandler(logging.Handler):
    """
    Route stdlib logging records (uvicorn, gunicorn) into Loguru.
    """

    def emit(self, record: logging.LogRecord):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so Loguru reports the real caller
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logger():
    """
    Configure Loguru sinks for the service.

    - Console sink on stdout, DEBUG in the dev environment
    - Optional file sink (LOG_TO_FILE): 10 MB rotation, 3 months retention, gzip
    - enqueue=True on both so gunicorn workers can share the file

    Call once from the application lifespan, before anything else logs.
    """
    logger.remove()

    log_level = LOG_LEVELS.get(settings.log_level, "INFO")

    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level="DEBUG" if settings.current_environment == Environment.DEV else log_level,
        colorize=True,
        enqueue=True,
        filter=correlation_filter,
    )

    if settings.log_to_file:
        LOG_DIR.mkdir(exist_ok=True)

        logger.add(
            LOG_FILE,
            format=FILE_FORMAT,
            level=log_level,
            rotation="10 MB",
            retention="3 months",
            compression="gz",
            enqueue=True,
            serialize=False,
            filter=correlation_filter,
            backtrace=True,
            diagnose=False,  # local variables may hold the signing secret
        )

    logger.info(
        f"Logger initialized | "
        f"Environment: {settings.current_environment.value} | "
        f"Level: {log_level} | "
        f"File: {LOG_FILE if settings.log_to_file else 'disabled'}"
    )


def configure_uvicorn_logging():
    """
    Point every ``uvicorn*`` stdlib logger at InterceptHandler.

    Must run after setup_logger().
    """
    # Level filtering happens in the Loguru sinks
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in list(logging.root.manager.loggerDict.keys()):
        if name.startswith("uvicorn"):
            logging.getLogger(name).handlers = [InterceptHandler()]
            logging.getLogger(name).propagate = False

    logger.debug("Uvicorn logging configured to use Loguru")


def shutdown_logger():
    """Drain the enqueued records before the process exits."""
    logger.info("Shutting down logger...")

    logger.complete()
