import logging
import os
from typing import Callable

from dotenv import load_dotenv

from ..errors import ScanCleanError

# Load environment variables first
load_dotenv()

logger = logging.getLogger("scanclean")


def setup_logging() -> None:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def run(body: Callable[[], None]) -> int:
    """Run a tool body; any expected failure becomes exit status 1."""
    try:
        body()
    except (ScanCleanError, FileNotFoundError) as err:
        logger.error("%s", err)
        return 1
    return 0
