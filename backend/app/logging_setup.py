from typing import Optional
import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

RECOMMENDER_LOGGER = "backend.recommender"

# one line per request / per event, too chatty at INFO
NOISY_LOGGERS = ("uvicorn.access",)


def parse_level(level: Optional[str], default: int = logging.INFO) -> int:
    if not level:
        return default
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else default


def setup_logging(level: str = "INFO", recommender_level: Optional[str] = None) -> None:
    """
      service logging:
    - root handler to stdout at `level`
    - the recommendation package can be turned up/down on its own
      (e.g. DEBUG to trace popularity fallbacks)
    """
    root_level = parse_level(level)
    logging.basicConfig(level=root_level, format=LOG_FORMAT, datefmt=LOG_DATEFMT, stream=sys.stdout)

    logging.getLogger(RECOMMENDER_LOGGER).setLevel(parse_level(recommender_level, default=root_level))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_level))
