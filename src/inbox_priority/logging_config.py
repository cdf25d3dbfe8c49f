import logging

from inbox_priority.config.paths import LOGS_DIR


def setup_logging(level: int = logging.INFO, log_to_file: bool = False) -> None:
    """Configure root logging for the backend and the dashboard client."""
    log_format = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_to_file:
        file_handler = logging.FileHandler(LOGS_DIR / "inbox_priority.log")
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=handlers,
    )
