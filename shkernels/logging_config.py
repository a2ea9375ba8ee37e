"""
Handler setup for scripts that drive the kernels.

Library modules only create module loggers. Per-launch records (extent, grid
and block of every kernel launch, distinct 3j symbols per coupling call) are
DEBUG records of the loggers in TRACE_LOGGERS and stay hidden unless a script
asks for them.
"""
import logging
import sys
from typing import List, Optional

NAMESPACES = ("shkernels", "gaunt")
TRACE_LOGGERS = ("shkernels.launch", "gaunt.wigner_3j")

_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def _make_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    formatter = logging.Formatter(_FORMAT, datefmt="%H:%M:%S")
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    trace_launches: bool = False,
) -> logging.Logger:
    """
    Route the kernel and coupling loggers to stdout (and optionally a file).

    Repeated calls replace the handlers from the previous call. With
    trace_launches the launch and 3j loggers drop to DEBUG while every other
    module keeps `level`. Returns the 'shkernels' logger.
    """
    handlers = _make_handlers(log_file)
    for name in NAMESPACES:
        logger = logging.getLogger(name)
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        logger.setLevel(level)
        for handler in handlers:
            logger.addHandler(handler)

    for name in TRACE_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if trace_launches else logging.NOTSET)

    logger = logging.getLogger("shkernels")
    logger.debug("logging to %s", log_file or "stdout")
    return logger
