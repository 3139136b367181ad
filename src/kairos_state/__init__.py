"""Boot mode and partition layout snapshot for Kairos hosts."""

from loguru import logger

__version__ = "0.1.0"

# Silent when used as a library; the CLI enables output in setup_logging.
logger.disable(__name__)
