"""Healthcheck validator for container orchestration."""

import logging

from sqlalchemy import text

from replayer.adapters.driven.config.settings import load_settings
from replayer.adapters.driven.logging.logging_config import configure_logs
from replayer.adapters.driven.storage.sql_store import create_store_engine

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Run health check for container orchestration.

    Validates:
    - Environment variables parse into valid settings.
    - The configuration seed file (if any) exists and is valid.
    - The database answers a trivial query.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
        engine = create_store_engine(settings.database_url)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        finally:
            engine.dispose()
    except Exception as exc:
        logger.error(f"Replayer healthcheck FAILED: {exc}")
        return 1

    logger.info("Replayer healthcheck OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
