import logging
from typing import Optional, TextIO


class LoggingConstants:
    NAME_WIDTH = 16
    FORMAT_TEMPLATE = "[%(levelname)-7s] %(asctime)s %(name)-{width}s %(message)s"
    DEFAULT_LEVEL = logging.WARNING


def setup_logging(level: int | str = LoggingConstants.DEFAULT_LEVEL, stream: Optional[TextIO] = None) -> None:
    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]
    format_str = LoggingConstants.FORMAT_TEMPLATE.format(width=LoggingConstants.NAME_WIDTH)
    logging.basicConfig(level=level, format=format_str, stream=stream)
