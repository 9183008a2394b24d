import logging
import sys

from ..config import settings

logger = logging.getLogger("isekai_rpg")

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(module)s] %(message)s")
    )
    logger.addHandler(_handler)
    logger.setLevel(settings.LOG_LEVEL.upper())
    logger.propagate = False
