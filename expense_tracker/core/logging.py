import logging

from expense_tracker.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = None, log_file: str = None) -> None:
    """Configure the root logger once for the whole process.

    Records always go to stderr; when a log file is configured they are
    mirrored there as well.
    """
    handlers = [logging.StreamHandler()]
    log_file = settings.LOG_FILE if log_file is None else log_file
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # SQL echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
