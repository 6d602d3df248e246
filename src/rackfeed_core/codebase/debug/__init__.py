import logging
import os
from functools import wraps

_SPY_LOGGER = logging.getLogger("rackfeed.spy")
_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def spy_enabled() -> bool:
    val = os.getenv("RACKFEED_SPY", "0")
    return str(val).lower() not in {"", "0", "false", "no"}


def spy_trace(func):
    """Log entry/exit of ``func`` on the ``rackfeed.spy`` logger when RACKFEED_SPY is set."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        if spy_enabled():
            _SPY_LOGGER.debug("Entering %s", func.__qualname__)
        result = func(*args, **kwargs)
        if spy_enabled():
            _SPY_LOGGER.debug("Exiting %s", func.__qualname__)
        return result

    return wrapper


def configure_logging(level: int = logging.WARNING) -> None:
    """
    Ensure the ``rackfeed`` logger tree has a handler in case the app didn't configure logging.
    Safe to call multiple times.
    """
    root = logging.getLogger("rackfeed")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(logging.DEBUG if spy_enabled() else level)
