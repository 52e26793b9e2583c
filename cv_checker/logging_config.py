import logging


def setup_logging(log_level: str = "INFO") -> None:
    """Configure root logging for the service."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
