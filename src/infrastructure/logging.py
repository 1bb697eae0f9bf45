import logging
import sys


def setup_logging(level: int = logging.INFO):
    """
    Configure the application's root logger.

    Uses the format "timestamp - logger name - level - message" for records and attaches a StreamHandler that writes logs to stdout.
    The inference engine's own logging is configured separately, through the Environment.

    Parameters:
        level (int): Root logger level (default logging.INFO).
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ],
        force=True,
    )
