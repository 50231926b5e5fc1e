import sys
from pathlib import Path

import loguru

DEFAULT_LOG_FILE = Path.home() / ".aicommits" / "aicommits.log"


def setup_logger(log_level="INFO", log_file=DEFAULT_LOG_FILE, console=True):
    """
    Set up a logger with console and file handlers.

    Args:
        log_level (str): The minimum level of logs to display on stderr.
        log_file: The file to which debug logs should be written. ``None`` disables it.
        console (bool): Whether to log to stderr at all.
    """
    loguru.logger.remove()  # Remove default handler

    # Console logger
    if console:
        loguru.logger.add(
            sys.stderr,
            level=log_level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            colorize=True,
        )

    if log_file is None:
        return loguru.logger

    # File logger
    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        loguru.logger.warning(f"Could not create log directory for {log_file}: {e}")
        return loguru.logger

    loguru.logger.add(
        str(log_file),
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        rotation="10 MB",
        retention="7 days",
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )

    return loguru.logger

# Console-only until the CLI decides where the file sink goes
logger = setup_logger(log_level="WARNING", log_file=None)
