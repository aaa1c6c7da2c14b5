import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path


def setup_logger(name: str, log_file: str) -> logging.Logger:
    """Configure and return a logger instance."""
    # Create logs directory if it doesn't exist
    log_dir = Path(log_file).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    # Re-importing must not stack handlers on the same file
    if any(
        isinstance(h, TimedRotatingFileHandler) and h.baseFilename == str(Path(log_file).resolve())
        for h in logger.handlers
    ):
        return logger

    handler = TimedRotatingFileHandler(
        log_file,
        when='D',  # Daily rotation
        interval=1,
        backupCount=90,  # Keep 90 days of logs
        encoding='utf-8',
        delay=True
    )

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger
