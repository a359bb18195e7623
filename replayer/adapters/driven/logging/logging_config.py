"""Console logging setup for the replayer."""

import logging

__all__ = ["configure_logs", "LOG_FORMAT"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"


def configure_logs(level: int = logging.INFO) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at ``level`` with a single console handler.
    - Framework loggers (aiohttp, asyncio, sqlalchemy) at WARNING level.
    - Application loggers (replayer) at DEBUG level.

    Calling it twice does not duplicate the handler.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_replayer_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handler._replayer_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # Suppress verbose framework loggers
    for name in ("aiohttp", "aiohttp.access", "asyncio", "sqlalchemy"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("replayer").setLevel(logging.DEBUG)
