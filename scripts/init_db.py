"""
Initialize the PostgreSQL schema for SnapTrade.

Run:
    python scripts/init_db.py
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from sqlalchemy.engine.url import make_url

from snaptrade.config import Settings, get_settings
from snaptrade.database.models import Base
from snaptrade.database.session import create_engine_from_settings, init_models

logger = logging.getLogger(__name__)


def configure_logging(log_level: str) -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


async def initialize_database(settings: Settings) -> None:
    engine = create_engine_from_settings(settings)
    safe_url = make_url(settings.DATABASE_URL).render_as_string(hide_password=True)
    logger.info("Connecting to database: %s", safe_url)

    try:
        await init_models(engine)
    finally:
        await engine.dispose()

    for table in Base.metadata.sorted_tables:
        logger.info("Table '%s': %s", table.name, _format_columns(table.columns))
    logger.info("Database schema ready.")


def _format_columns(columns: Iterable) -> str:
    parts: list[str] = []
    for col in columns:
        nullable = "NULL" if col.nullable else "NOT NULL"
        parts.append(f"{col.name} {col.type} {nullable}")
    return "; ".join(parts)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(initialize_database(settings))


if __name__ == "__main__":
    main()
