"""
Logging configuration for the application.
"""
import sys
from pathlib import Path
from loguru import logger
from catalog.config import settings


def setup_logging() -> None:
    """
    Configure loguru for console output and rotating log files.

    Debug mode logs coloured text to stdout; otherwise records are
    serialized as JSON. File sinks are added when ``log_to_file`` is set.
    """
    logger.remove()

    # Console logging
    if settings.debug:
        logger.add(
            sys.stdout,
            colorize=True,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            level="DEBUG"
        )
    else:
        logger.add(
            sys.stdout,
            serialize=True,
            level=settings.log_level
        )

    if not settings.log_to_file:
        logger.info("✅ Logging configured (console only)")
        return

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Application logs
    logger.add(
        log_dir / "app_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="30 days",
        compression="zip",
        level=settings.log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        enqueue=True,
    )

    # Error logs
    logger.add(
        log_dir / "errors_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="90 days",
        compression="zip",
        level="ERROR",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}\n{exception}",
        enqueue=True,
        backtrace=True,
        diagnose=settings.debug,
    )

    # Access logs (HTTP requests)
    logger.add(
        log_dir / "access_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="14 days",
        compression="zip",
        level="INFO",
        format="{time:YYYY-MM-DD HH:mm:ss} | {message}",
        filter=lambda record: "access" in record["extra"],
        enqueue=True,
    )

    logger.info("✅ Logging configured successfully")
    logger.debug(f"Log directory: {log_dir.absolute()}")
