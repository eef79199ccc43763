import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    """Configure root logging for the API, the console and the demo script."""
    logging.basicConfig(level=getattr(logging, log_level.upper()), format=LOG_FORMAT)
