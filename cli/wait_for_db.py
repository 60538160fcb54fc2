# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: wait_for_db.py
# -----------------------------------------------------------------------------
"""Block until the recordings database answers SELECT 1 (container start-up)."""
import sys
import time
from typing import Callable, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from config.Config import Config
from exceptions import ConfigurationError
from utility.logging_utils import get_logger

logger = get_logger(__name__)

MAX_ATTEMPTS = 60
INTERVAL_SECONDS = 1.0


def wait_for_database(
        engine: Engine,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        interval: float = INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
) -> bool:
    for attempt in range(1, max_attempts + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database is ready")
            return True
        except SQLAlchemyError as e:
            if attempt >= max_attempts:
                logger.error("Database connection timeout after %d attempts: %s", max_attempts, e)
                return False
            logger.info("Waiting for database... (%d/%d)", attempt, max_attempts)
            sleep(interval)
    return False


def main(cfg: Optional[Config] = None) -> int:
    cfg = cfg or Config.from_env()
    try:
        cfg.validate("database_url")
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    engine = create_engine(cfg.database_url, pool_pre_ping=True)
    try:
        return 0 if wait_for_database(engine) else 1
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
